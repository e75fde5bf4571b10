"""GitHub REST wrapper — pull-request files, commits, check runs, comments."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx

from diffguard.config.schema import DEFAULT_API_URL, GitHubConfig
from diffguard.errors import GitHubError
from diffguard.github.models import (
    CheckRun,
    CommitDetail,
    PullRequestCommit,
    PullRequestFile,
    ReviewComment,
)

logger = logging.getLogger(__name__)

_ACCEPT = "application/vnd.github+json"
_API_VERSION = "2022-11-28"


class GitHubClient:
    """Thin synchronous client over the endpoints diffguard needs.

    Failures are not retried: any HTTP or transport error is raised as
    ``GitHubError`` with the original exception chained.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {
            "Accept": _ACCEPT,
            "X-GitHub-Api-Version": _API_VERSION,
            "User-Agent": "diffguard",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.page_size = page_size
        self._http = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, cfg: GitHubConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> "GitHubClient":
        return cls(
            cfg.token,
            api_url=cfg.api_url,
            timeout=cfg.timeout,
            page_size=cfg.page_size,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- transport ----

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and return the response. Raises GitHubError on failure."""
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubError(f"GitHub request failed: {method} {url}: {exc}") from exc

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            detail = payload.get("message", "") if isinstance(payload, dict) else response.text[:200]
            raise GitHubError(
                f"GitHub API error {response.status_code} for {method} {url}: {detail}",
                status_code=response.status_code,
            )
        return response

    def _json(self, method: str, url: str, **kwargs: Any) -> Any:
        response = self._request(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError(f"Invalid JSON from {method} {url}") from exc

    def _paginate(self, url: str, key: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """Yield items across every page, following the ``Link: rel=next`` header."""
        next_url: Optional[str] = url
        params: Optional[Dict[str, Any]] = {"per_page": self.page_size}
        while next_url:
            response = self._request("GET", next_url, params=params)
            try:
                data = response.json()
            except ValueError as exc:
                raise GitHubError(f"Invalid JSON from GET {next_url}") from exc
            items = data.get(key, []) if key and isinstance(data, dict) else data
            if not isinstance(items, list):
                raise GitHubError(f"Expected a list from GET {next_url}")
            yield from items
            next_url = response.links.get("next", {}).get("url")
            params = None  # the next link already carries the query string

    # ---- pull requests ----

    def list_pull_files(self, owner: str, repo: str, number: int) -> List[PullRequestFile]:
        url = f"/repos/{owner}/{repo}/pulls/{number}/files"
        return [PullRequestFile.from_api(item) for item in self._paginate(url)]

    def list_pull_commits(self, owner: str, repo: str, number: int) -> List[PullRequestCommit]:
        """Return PR commits oldest to newest."""
        url = f"/repos/{owner}/{repo}/pulls/{number}/commits"
        return [PullRequestCommit.from_api(item) for item in self._paginate(url)]

    def create_review_comment(
        self, owner: str, repo: str, number: int, comment: ReviewComment
    ) -> Dict[str, Any]:
        url = f"/repos/{owner}/{repo}/pulls/{number}/comments"
        return self._json("POST", url, json=comment.to_api())

    # ---- commits and checks ----

    def get_commit(self, owner: str, repo: str, ref: str) -> CommitDetail:
        """Fetch a commit, collecting its file list across every page.

        Each page repeats the commit itself; only ``files`` differs.
        """
        next_url: Optional[str] = f"/repos/{owner}/{repo}/commits/{ref}"
        data: Dict[str, Any] = {}
        files: List[Any] = []
        while next_url:
            response = self._request("GET", next_url)
            try:
                page = response.json()
            except ValueError as exc:
                raise GitHubError(f"Invalid JSON from GET {next_url}") from exc
            if not isinstance(page, dict):
                raise GitHubError(f"Expected an object from GET {next_url}")
            data = data or page
            files.extend(page.get("files") or [])
            next_url = response.links.get("next", {}).get("url")
        return CommitDetail.from_api({**data, "files": files})

    def list_check_runs(self, owner: str, repo: str, ref: str) -> List[CheckRun]:
        url = f"/repos/{owner}/{repo}/commits/{ref}/check-runs"
        return [CheckRun.from_api(item) for item in self._paginate(url, key="check_runs")]

    # ---- issues and collaborators ----

    def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> Dict[str, Any]:
        url = f"/repos/{owner}/{repo}/issues/{number}/comments"
        return self._json("POST", url, json={"body": body})

    def get_collaborator_permission(self, owner: str, repo: str, username: str) -> str:
        url = f"/repos/{owner}/{repo}/collaborators/{username}/permission"
        data = self._json("GET", url)
        permission = data.get("permission") if isinstance(data, dict) else None
        if not isinstance(permission, str):
            raise GitHubError(f"No permission field for collaborator {username}")
        return permission
