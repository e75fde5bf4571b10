"""Review-comment publisher — one comment per new finding."""

from __future__ import annotations

import logging
from typing import Collection, Iterable, List

from diffguard.config.schema import DEFAULT_SUGGESTION_PREFIX, AnnotateConfig
from diffguard.findings.classifier import classify, partition
from diffguard.findings.models import AnnotationResult, ClassifiedFinding, Finding
from diffguard.git.models import DiffReport
from diffguard.github.client import GitHubClient
from diffguard.github.event import PullRequestContext
from diffguard.github.models import PullRequestEvent, ReviewComment

logger = logging.getLogger(__name__)


class CommentPublisher:
    """Post review comments for findings introduced by unscanned changes.

    Comments are posted one API call at a time with no dedup against
    comments left by earlier runs.
    """

    def __init__(
        self,
        client: GitHubClient,
        context: PullRequestContext,
        diff: DiffReport,
        *,
        error_severities: Collection[str] = ("High",),
        suggestion_prefix: str = DEFAULT_SUGGESTION_PREFIX,
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.context = context
        self.diff = diff
        self.error_severities = set(error_severities)
        self.suggestion_prefix = suggestion_prefix
        self.dry_run = dry_run

    @classmethod
    def from_config(
        cls,
        client: GitHubClient,
        context: PullRequestContext,
        diff: DiffReport,
        cfg: AnnotateConfig,
        *,
        dry_run: bool = False,
    ) -> "CommentPublisher":
        return cls(
            client,
            context,
            diff,
            error_severities=cfg.error_severities,
            suggestion_prefix=cfg.suggestion_prefix,
            dry_run=dry_run,
        )

    def publish(self, findings: Iterable[Finding]) -> AnnotationResult:
        result = AnnotationResult()
        errors, warnings = partition(findings, self.error_severities)
        if not errors and not warnings:
            return result

        event = self.context.event
        result.errors = classify(errors, event, self.diff.pull_request, self.diff.unchecked_commits)
        if not result.errors.in_diff:
            logger.info("No errors found in the current pull request changes")
        else:
            self._post(result.errors.current, prefix="")
            result.new_comments = len(result.errors.current)
            if event == PullRequestEvent.SYNCHRONIZE:
                result.unaddressed_comments = len(result.errors.previous)

        result.warnings = classify(warnings, event, self.diff.pull_request, self.diff.unchecked_commits)
        self._post(result.warnings.current, prefix=self.suggestion_prefix)
        result.new_suggestions = len(result.warnings.current)
        return result

    def _post(self, items: List[ClassifiedFinding], prefix: str) -> None:
        ctx = self.context
        for item in items:
            comment = ReviewComment(
                body=prefix + item.message,
                path=item.file,
                line=item.line,
                commit_id=ctx.head_sha,
            )
            if self.dry_run:
                logger.info("[dry-run] would comment on %s:%d", comment.path, comment.line)
                continue
            logger.info("Commenting on %s:%d", comment.path, comment.line)
            self.client.create_review_comment(ctx.owner, ctx.repo, ctx.number, comment)
