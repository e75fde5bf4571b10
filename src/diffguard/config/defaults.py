"""Starter .diffguard.toml template."""

DEFAULT_TOML = """\
# diffguard configuration
version = "1.0"

[github]
# api_url = "https://api.github.com"   # or GITHUB_API_URL
page_size = 100
timeout = 30.0
max_workers = 4            # parallel commit-detail fetches

[diff]
check_name = "semgrep"     # completed check run marking a commit as scanned
# include = ["*.go"]        # empty = every file
# exclude = ["vendor/*"]
# line_exclude = ["^\\\\s*//"]

[annotate]
error_severities = ["High"]
suggestion_prefix = "Consider this as a suggestion. "
fail_on_new = true

[coverage]
tmp_dir = "coverage"
# remote_dir = "pr-123"
include = ["*.go"]
allow_partial = false
"""
