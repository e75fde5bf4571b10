"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SUGGESTION_PREFIX = "Consider this as a suggestion. "


@dataclass
class GitHubConfig:
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None  # normally supplied via GITHUB_TOKEN
    page_size: int = 100
    timeout: float = 30.0
    max_workers: int = 4  # parallel commit-detail fetches


@dataclass
class DiffConfig:
    check_name: str = "semgrep"  # check run that marks a commit as scanned
    include: List[str] = field(default_factory=list)  # empty = every file
    exclude: List[str] = field(default_factory=list)
    line_exclude: List[str] = field(default_factory=list)  # regexes on added line content


@dataclass
class AnnotateConfig:
    error_severities: List[str] = field(default_factory=lambda: ["High"])
    suggestion_prefix: str = DEFAULT_SUGGESTION_PREFIX
    fail_on_new: bool = True


@dataclass
class CoverageConfig:
    tmp_dir: str = "coverage"
    remote_dir: str = ""
    include: List[str] = field(default_factory=lambda: ["*.go"])
    allow_partial: bool = False


@dataclass
class DiffGuardConfig:
    version: str = "1.0"
    github: GitHubConfig = field(default_factory=GitHubConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    annotate: AnnotateConfig = field(default_factory=AnnotateConfig)
    coverage: CoverageConfig = field(default_factory=CoverageConfig)
