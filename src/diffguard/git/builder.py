"""Diff builder — changed lines for a pull request and for its unscanned commits.

A commit counts as scanned once it carries a completed check run with the
configured name. On a ``synchronize`` event only the commits pushed since
the last scanned one contribute to the unscanned-commit diff, and only for
lines that still survive in the pull request diff.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import PurePosixPath
from typing import Callable, List, Optional

from diffguard.config.schema import CoverageConfig, DiffConfig
from diffguard.git.diff_parser import (
    FileFilter,
    LineFilter,
    glob_file_filter,
    parse_files,
    regex_line_filter,
)
from diffguard.git.models import DiffReport, UnifiedDiff
from diffguard.github.client import GitHubClient
from diffguard.github.event import PullRequestContext
from diffguard.github.models import CommitDetail, PullRequestEvent

logger = logging.getLogger(__name__)

DirectoryExtractor = Callable[[str, str], str]


class DiffBuilder:
    """Build the pull-request and unscanned-commit diffs for one PR event."""

    def __init__(
        self,
        client: GitHubClient,
        context: PullRequestContext,
        check_name: str,
        *,
        file_filter: Optional[FileFilter] = None,
        line_filter: Optional[LineFilter] = None,
        max_workers: int = 1,
    ) -> None:
        self.client = client
        self.context = context
        self.check_name = check_name
        self.file_filter = file_filter
        self.line_filter = line_filter
        self.max_workers = max_workers

    @classmethod
    def from_config(
        cls,
        client: GitHubClient,
        context: PullRequestContext,
        cfg: DiffConfig,
        max_workers: int = 1,
    ) -> "DiffBuilder":
        return cls(
            client,
            context,
            cfg.check_name,
            file_filter=glob_file_filter(cfg.include, cfg.exclude),
            line_filter=regex_line_filter(cfg.line_exclude),
            max_workers=max_workers,
        )

    # ---- public ----

    def build_diff(self) -> DiffReport:
        """Return the PR diff and, on synchronize, the unscanned-commit diff."""
        ctx = self.context
        files = self.client.list_pull_files(ctx.owner, ctx.repo, ctx.number)
        pr_diff = parse_files(files, self.file_filter, self.line_filter)
        logger.info("Pull request #%d touches %d file(s) with added lines", ctx.number, len(pr_diff))

        commits_diff: UnifiedDiff = {}
        if pr_diff and ctx.event == PullRequestEvent.SYNCHRONIZE:
            commits_diff = self.non_scanned_commit_diff(pr_diff)

        return DiffReport(pull_request=pr_diff, unchecked_commits=commits_diff)

    def non_scanned_commit_diff(self, pr_diff: UnifiedDiff) -> UnifiedDiff:
        """Return lines changed by unscanned commits that still appear in *pr_diff*."""
        result: UnifiedDiff = {}
        for detail in self._fetch_commits(self.non_scanned_commits()):
            commit_diff = parse_files(detail.files, self.file_filter, self.line_filter)
            for path, lines in commit_diff.items():
                # Changes fully reverted later leave no entry in the PR diff
                pr_lines = pr_diff.get(path)
                if not pr_lines:
                    continue
                pr_set = set(pr_lines)
                merged = result.setdefault(path, [])
                for line in lines:
                    if line in pr_set and line not in merged:
                        merged.append(line)
                if not merged:
                    del result[path]
        return result

    def non_scanned_commits(self) -> List[str]:
        """Return SHAs of commits after the last scanned one, oldest first."""
        ctx = self.context
        commits = self.client.list_pull_commits(ctx.owner, ctx.repo, ctx.number)

        pending: List[str] = []
        for commit in reversed(commits):
            if commit.is_merge:
                logger.debug("Skipping merge commit %s", commit.sha)
                continue
            if self._is_scanned(commit.sha):
                logger.info("Commit %s already scanned by '%s'", commit.sha, self.check_name)
                break
            pending.append(commit.sha)

        pending.reverse()
        logger.info("%d unscanned commit(s)", len(pending))
        return pending

    def directories(self, extractor: DirectoryExtractor) -> List[str]:
        """Return unique non-empty directories derived from the PR's files."""
        ctx = self.context
        found: List[str] = []
        for f in self.client.list_pull_files(ctx.owner, ctx.repo, ctx.number):
            directory = extractor(f.filename, f.status)
            if directory and directory not in found:
                found.append(directory)
        return found

    # ---- internals ----

    def _is_scanned(self, sha: str) -> bool:
        runs = self.client.list_check_runs(self.context.owner, self.context.repo, sha)
        return any(run.is_completed and run.name == self.check_name for run in runs)

    def _fetch_commits(self, shas: List[str]) -> List[CommitDetail]:
        ctx = self.context
        if self.max_workers <= 1 or len(shas) <= 1:
            return [self.client.get_commit(ctx.owner, ctx.repo, sha) for sha in shas]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            # map() keeps input order, so the result stays chronological
            return list(pool.map(lambda sha: self.client.get_commit(ctx.owner, ctx.repo, sha), shas))


def coverage_directory_extractor(cfg: CoverageConfig) -> DirectoryExtractor:
    """Parent directory of every non-removed file matching the coverage globs."""
    matches = glob_file_filter(cfg.include)

    def extract(filename: str, status: str) -> str:
        if status == "removed" or not matches(filename):
            return ""
        parent = str(PurePosixPath(filename).parent)
        return "" if parent == "." else parent

    return extract
