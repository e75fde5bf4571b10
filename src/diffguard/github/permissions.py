"""Collaborator permission check."""

from __future__ import annotations

from diffguard.github.client import GitHubClient
from diffguard.github.models import Permission

_WRITE_LEVELS = {Permission.WRITE.value, Permission.ADMIN.value}


def has_write_permission(client: GitHubClient, owner: str, repo: str, user: str) -> bool:
    """Return True if *user* has write or admin access to the repository."""
    return client.get_collaborator_permission(owner, repo, user) in _WRITE_LEVELS
