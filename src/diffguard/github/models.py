"""Typed records for the GitHub REST payloads diffguard consumes.

Each record validates its slice of the response in ``from_api`` so that a
malformed payload fails at the boundary instead of deep inside the diff
builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from diffguard.errors import GitHubError


class PullRequestEvent(str, Enum):
    OPENED = "opened"
    SYNCHRONIZE = "synchronize"


class Permission(str, Enum):
    ADMIN = "admin"
    MAINTAIN = "maintain"
    WRITE = "write"
    TRIAGE = "triage"
    READ = "read"
    NONE = "none"


COMPLETED_STATUS = "completed"


def _require(data: Any, key: str, kind: type, where: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise GitHubError(f"{where}: missing '{key}' in API response")
    value = data[key]
    if not isinstance(value, kind):
        raise GitHubError(f"{where}: '{key}' has unexpected type {type(value).__name__}")
    return value


@dataclass(frozen=True)
class PullRequestFile:
    """A file entry from ``pulls/{n}/files`` or ``commits/{sha}``."""

    filename: str
    status: str = "modified"
    patch: Optional[str] = None  # absent for binary and rename-only changes

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PullRequestFile":
        filename = _require(data, "filename", str, "file")
        patch = data.get("patch")
        return cls(
            filename=filename,
            status=str(data.get("status", "modified")),
            patch=patch if isinstance(patch, str) else None,
        )


@dataclass(frozen=True)
class PullRequestCommit:
    """A commit entry from ``pulls/{n}/commits``."""

    sha: str
    parents: Tuple[str, ...] = ()

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PullRequestCommit":
        sha = _require(data, "sha", str, "commit")
        parents = _require(data, "parents", list, f"commit {sha}")
        return cls(
            sha=sha,
            parents=tuple(p["sha"] for p in parents if isinstance(p, dict) and "sha" in p),
        )


@dataclass(frozen=True)
class CommitDetail:
    """A single commit with its changed files, from ``commits/{sha}``."""

    sha: str
    files: List[PullRequestFile] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CommitDetail":
        sha = _require(data, "sha", str, "commit")
        files = data.get("files") or []
        return cls(sha=sha, files=[PullRequestFile.from_api(f) for f in files])


@dataclass(frozen=True)
class CheckRun:
    name: str
    status: str
    conclusion: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED_STATUS

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CheckRun":
        return cls(
            name=_require(data, "name", str, "check run"),
            status=_require(data, "status", str, "check run"),
            conclusion=data.get("conclusion"),
        )


@dataclass(frozen=True)
class ReviewComment:
    """Payload for ``POST pulls/{n}/comments``."""

    body: str
    path: str
    line: int
    commit_id: str

    def to_api(self) -> Dict[str, Any]:
        return {
            "body": self.body,
            "path": self.path,
            "line": self.line,
            "commit_id": self.commit_id,
        }
