"""Exception hierarchy shared by every layer."""

from __future__ import annotations


class DiffGuardError(Exception):
    """Base class for all errors raised by diffguard."""


class EventError(DiffGuardError):
    """Raised when the pull-request event payload is missing or unsupported."""


class FindingsError(DiffGuardError):
    """Raised when a findings file cannot be read or has an unknown shape."""


class CoverageError(DiffGuardError):
    """Raised when a coverage summary file is missing."""


class GitHubError(DiffGuardError):
    """Raised when the GitHub API fails or returns an unexpected payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
