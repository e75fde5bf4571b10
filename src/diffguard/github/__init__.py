"""GitHub interface layer — REST client, event context, typed payloads."""

from diffguard.errors import GitHubError
from diffguard.github.client import GitHubClient
from diffguard.github.event import PullRequestContext, load_context, parse_event
from diffguard.github.models import (
    CheckRun,
    CommitDetail,
    Permission,
    PullRequestCommit,
    PullRequestEvent,
    PullRequestFile,
    ReviewComment,
)
from diffguard.github.permissions import has_write_permission

__all__ = [
    "CheckRun",
    "CommitDetail",
    "GitHubClient",
    "GitHubError",
    "Permission",
    "PullRequestCommit",
    "PullRequestContext",
    "PullRequestEvent",
    "PullRequestFile",
    "ReviewComment",
    "has_write_permission",
    "load_context",
    "parse_event",
]
