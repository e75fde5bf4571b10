"""Data models for diff parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

# file path -> added/modified line numbers (no duplicates, order irrelevant)
UnifiedDiff = Dict[str, List[int]]


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single added line from a patch, numbered in the new file."""

    file: str
    line_no: int
    content: str


@dataclass(frozen=True)
class FileSkipped:
    """Record of a file that contributed no lines to a diff."""

    path: str
    reason: str  # 'no_patch', 'filtered', 'no_additions'


@dataclass
class DiffReport:
    """Result of building the diff for a pull request."""

    pull_request: UnifiedDiff = field(default_factory=dict)
    unchecked_commits: UnifiedDiff = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.pull_request)

    @property
    def files(self) -> List[str]:
        return list(self.pull_request)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pullRequest": {
                "hasChanges": self.has_changes,
                "files": " ".join(self.files),
                "diff": self.pull_request,
            },
            "uncheckedCommits": {"diff": self.unchecked_commits},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiffReport":
        pr = data.get("pullRequest", {}).get("diff", {}) or {}
        commits = data.get("uncheckedCommits", {}).get("diff", {}) or {}
        return cls(
            pull_request={f: [int(n) for n in lines] for f, lines in pr.items()},
            unchecked_commits={f: [int(n) for n in lines] for f, lines in commits.items()},
        )
