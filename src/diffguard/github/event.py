"""Pull-request context — read from the GitHub Actions event payload."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from diffguard.errors import EventError
from diffguard.github.models import PullRequestEvent


@dataclass(frozen=True)
class PullRequestContext:
    owner: str
    repo: str
    number: int
    event: Optional[PullRequestEvent]  # None when the command does not need it
    head_sha: str


def parse_event(value: str) -> PullRequestEvent:
    """Map an event action string to PullRequestEvent, rejecting anything else."""
    try:
        return PullRequestEvent(value)
    except ValueError:
        allowed = ", ".join(e.value for e in PullRequestEvent)
        raise EventError(f"Unsupported pull request event '{value}' (expected one of: {allowed})") from None


def _known_event(value: Optional[str]) -> Optional[PullRequestEvent]:
    try:
        return PullRequestEvent(value) if value else None
    except ValueError:
        return None


def _read_payload(event_path: Optional[str]) -> Dict[str, Any]:
    if not event_path:
        return {}
    path = Path(event_path)
    if not path.is_file():
        raise EventError(f"Event payload not found: {event_path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise EventError(f"Failed to read event payload {event_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise EventError(f"Event payload {event_path} is not a JSON object")
    return data


def load_context(
    *,
    repository: Optional[str] = None,
    number: Optional[int] = None,
    event: Optional[str] = None,
    head_sha: Optional[str] = None,
    event_path: Optional[str] = None,
    require_event: bool = True,
) -> PullRequestContext:
    """Build a PullRequestContext.

    Explicit arguments win; anything missing is taken from the Actions
    environment (``GITHUB_REPOSITORY``, ``GITHUB_EVENT_PATH``). With
    *require_event* off, any event kind is accepted and unsupported ones
    leave ``event`` as None.
    """
    payload = _read_payload(event_path or os.environ.get("GITHUB_EVENT_PATH"))
    pr = payload.get("pull_request") or {}

    repository = repository or os.environ.get("GITHUB_REPOSITORY") or (
        (payload.get("repository") or {}).get("full_name")
    )
    if not repository or "/" not in repository:
        raise EventError("Repository must be given as owner/name")
    owner, repo = repository.split("/", 1)

    number = number if number is not None else pr.get("number")
    if not isinstance(number, int):
        raise EventError("Pull request number is missing")

    action = event or payload.get("action")
    if require_event and not action:
        raise EventError("Pull request event kind is missing")

    head_sha = head_sha or (pr.get("head") or {}).get("sha")
    if not head_sha:
        raise EventError("Head commit SHA is missing")

    return PullRequestContext(
        owner=owner,
        repo=repo,
        number=number,
        event=parse_event(action) if require_event else _known_event(action),
        head_sha=head_sha,
    )
