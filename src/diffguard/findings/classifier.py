"""Finding classification against the pull-request and unscanned-commit diffs."""

from __future__ import annotations

from typing import Collection, Iterable, List, Optional, Tuple

from diffguard.findings.models import Bucket, ClassifiedFinding, Finding, SplitResult
from diffguard.git.models import UnifiedDiff
from diffguard.github.models import PullRequestEvent


def match_line(finding: Finding, diff: UnifiedDiff) -> Optional[int]:
    """Return the finding's start or end line if the diff touches it, else None."""
    lines = diff.get(finding.file)
    if not lines:
        return None
    if finding.start_line in lines:
        return finding.start_line
    if finding.end_line in lines:
        return finding.end_line
    return None


def classify(
    findings: Iterable[Finding],
    event: PullRequestEvent,
    pr_diff: UnifiedDiff,
    commits_diff: UnifiedDiff,
) -> SplitResult:
    """Bucket each finding as current, previous, or outside the diff.

    On ``opened`` every finding inside the PR diff is current. On
    ``synchronize`` it is current only when the unscanned commits touched
    it, otherwise it was already reported by an earlier scan.
    """
    result = SplitResult()
    for finding in findings:
        pr_line = match_line(finding, pr_diff)
        if pr_line is None:
            result.add(ClassifiedFinding(finding, finding.start_line, Bucket.OUTSIDE_DIFF))
            continue

        if event == PullRequestEvent.OPENED:
            result.add(ClassifiedFinding(finding, pr_line, Bucket.IN_DIFF_CURRENT))
            continue

        commit_line = match_line(finding, commits_diff)
        if commit_line is not None:
            result.add(ClassifiedFinding(finding, commit_line, Bucket.IN_DIFF_CURRENT))
        else:
            result.add(ClassifiedFinding(finding, pr_line, Bucket.IN_DIFF_PREVIOUS))
    return result


def partition(
    findings: Iterable[Finding], error_severities: Collection[str]
) -> Tuple[List[Finding], List[Finding]]:
    """Split findings into blocking errors and advisory warnings."""
    errors: List[Finding] = []
    warnings: List[Finding] = []
    for f in findings:
        (errors if f.severity in error_severities else warnings).append(f)
    return errors, warnings
