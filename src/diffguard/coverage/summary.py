"""Code coverage summary comment — per-directory text reports plus heat-map links."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from diffguard.config.schema import CoverageConfig
from diffguard.errors import CoverageError
from diffguard.github.client import GitHubClient
from diffguard.github.event import PullRequestContext

logger = logging.getLogger(__name__)

_PREVIEW_BASE = "https://htmlpreview.github.io/?https://github.com"


class CoverageReporter:
    """Build and post the coverage summary comment for a pull request."""

    def __init__(
        self,
        client: GitHubClient,
        context: PullRequestContext,
        tmp_dir: Path,
        remote_dir: str = "",
        *,
        allow_partial: bool = False,
    ) -> None:
        self.client = client
        self.context = context
        self.tmp_dir = tmp_dir
        self.allow_partial = allow_partial
        base = f"{_PREVIEW_BASE}/{context.owner}/{context.repo}/coverage-preview"
        self.preview_base_url = f"{base}/{remote_dir}" if remote_dir else base

    @classmethod
    def from_config(
        cls, client: GitHubClient, context: PullRequestContext, cfg: CoverageConfig
    ) -> "CoverageReporter":
        return cls(
            client,
            context,
            Path(cfg.tmp_dir),
            cfg.remote_dir,
            allow_partial=cfg.allow_partial,
        )

    def build_body(self, directories: List[str]) -> str:
        """Render the comment body. Raises CoverageError on a missing report
        unless partial summaries are allowed."""
        lines = [
            "## Code coverage summary ",
            "Note: ",
            "- Tests are not expected to cover code paths that only fail on marshal and unmarshal errors ",
            f"- Coverage summary encompasses all commits leading up to the latest one, {self.context.head_sha} ",
        ]
        for directory in directories:
            data = self._read_report(directory)
            lines.append(f"#### {directory} ")
            if data is None:
                lines.append("Coverage report not found ")
                continue
            lines.append(f"Refer [here]({self.preview_base_url}/{directory}.html) for heat map coverage report ")
            lines.append("``` ")
            lines.append(data)
            lines.append(" ``` ")
        return "\n".join(lines) + "\n"

    def post(self, directories: List[str]) -> str:
        """Post the summary as an issue comment and return its body."""
        body = self.build_body(directories)
        ctx = self.context
        self.client.create_issue_comment(ctx.owner, ctx.repo, ctx.number, body)
        logger.info("Posted coverage summary for %d director(ies)", len(directories))
        return body

    def _read_report(self, directory: str) -> Optional[str]:
        path = self.tmp_dir / f"{directory}.txt"
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Coverage report missing for %s: %s", directory, exc)
            if self.allow_partial:
                return None
            raise CoverageError(f"Coverage report not found: {path}") from exc
