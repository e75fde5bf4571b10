"""Shared test fixtures — sample patches, a fake GitHub API, PR contexts."""

from __future__ import annotations

import json
import re
import textwrap
from typing import Any, Dict, List, Optional

import httpx
import pytest

from diffguard.github.client import GitHubClient
from diffguard.github.event import PullRequestContext
from diffguard.github.models import PullRequestEvent

OWNER = "acme"
REPO = "widgets"
PR_NUMBER = 7
HEAD_SHA = "c3"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the runner's own Actions environment out of the tests."""
    for var in (
        "GITHUB_TOKEN",
        "GITHUB_API_URL",
        "GITHUB_REPOSITORY",
        "GITHUB_EVENT_PATH",
        "DIFFGUARD_TOKEN",
        "DIFFGUARD_CHECK_NAME",
        "DIFFGUARD_ERROR_SEVERITIES",
        "DIFFGUARD_INCLUDE",
        "DIFFGUARD_COVERAGE_DIR",
        "DIFFGUARD_PAGE_SIZE",
    ):
        monkeypatch.delenv(var, raising=False)


def added_patch(start: int, lines: List[str]) -> str:
    """A patch that adds *lines* at *start* in a file that was otherwise empty there."""
    header = f"@@ -{start - 1},0 +{start},{len(lines)} @@"
    return "\n".join([header] + [f"+{line}" for line in lines])


class FakeGitHub:
    """In-memory GitHub REST API served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.pull_files: List[Dict[str, Any]] = []
        self.pull_commits: List[Dict[str, Any]] = []
        self.commits: Dict[str, Dict[str, Any]] = {}
        self.check_runs: Dict[str, List[Dict[str, Any]]] = {}
        self.permissions: Dict[str, str] = {}
        self.review_comments: List[Dict[str, Any]] = []
        self.issue_comments: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        self.fail_paths: Dict[str, int] = {}
        self.commit_files_per_page: Optional[int] = None

    # ---- setup helpers ----

    def add_commit(
        self,
        sha: str,
        files: Dict[str, Optional[str]],
        parents: Optional[List[str]] = None,
        checks: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        self.pull_commits.append({"sha": sha, "parents": [{"sha": p} for p in (parents or ["base"])]})
        self.commits[sha] = {
            "sha": sha,
            "files": [{"filename": f, "status": "modified", "patch": p} for f, p in files.items()],
        }
        self.check_runs[sha] = checks or []

    def set_pull_files(self, files: Dict[str, Optional[str]], status: str = "modified") -> None:
        self.pull_files = [
            {"filename": f, "status": status, "patch": p} if p is not None
            else {"filename": f, "status": status}
            for f, p in files.items()
        ]

    # ---- transport ----

    def _page(self, request: httpx.Request, items: List[Any]) -> httpx.Response:
        per_page = int(request.url.params.get("per_page", "30"))
        page = int(request.url.params.get("page", "1"))
        chunk = items[(page - 1) * per_page: page * per_page]
        headers = {}
        if page * per_page < len(items):
            next_url = request.url.copy_merge_params({"page": str(page + 1), "per_page": str(per_page)})
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=chunk, headers=headers)

    def _commit_page(self, request: httpx.Request, commit: Dict[str, Any]) -> httpx.Response:
        size = self.commit_files_per_page
        if size is None:
            return httpx.Response(200, json=commit)
        page = int(request.url.params.get("page", "1"))
        files = commit["files"]
        headers = {}
        if page * size < len(files):
            next_url = request.url.copy_merge_params({"page": str(page + 1)})
            headers["Link"] = f'<{next_url}>; rel="next"'
        chunk = files[(page - 1) * size: page * size]
        return httpx.Response(200, json={**commit, "files": chunk}, headers=headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        prefix = f"/repos/{OWNER}/{REPO}"

        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path], json={"message": "boom"})

        if request.method == "GET" and path == f"{prefix}/pulls/{PR_NUMBER}/files":
            return self._page(request, self.pull_files)
        if request.method == "GET" and path == f"{prefix}/pulls/{PR_NUMBER}/commits":
            return self._page(request, self.pull_commits)
        if request.method == "POST" and path == f"{prefix}/pulls/{PR_NUMBER}/comments":
            body = json.loads(request.content)
            self.review_comments.append(body)
            return httpx.Response(201, json={"id": len(self.review_comments), **body})
        if request.method == "POST" and path == f"{prefix}/issues/{PR_NUMBER}/comments":
            body = json.loads(request.content)
            self.issue_comments.append(body)
            return httpx.Response(201, json={"id": len(self.issue_comments), **body})

        m = re.fullmatch(rf"{prefix}/commits/([^/]+)/check-runs", path)
        if m:
            runs = self.check_runs.get(m.group(1), [])
            return httpx.Response(200, json={"total_count": len(runs), "check_runs": runs})
        m = re.fullmatch(rf"{prefix}/commits/([^/]+)", path)
        if m and m.group(1) in self.commits:
            return self._commit_page(request, self.commits[m.group(1)])
        m = re.fullmatch(rf"{prefix}/collaborators/([^/]+)/permission", path)
        if m:
            return httpx.Response(200, json={"permission": self.permissions.get(m.group(1), "none")})

        return httpx.Response(404, json={"message": "Not Found"})

    def client(self, page_size: int = 100) -> GitHubClient:
        return GitHubClient(
            "test-token",
            api_url="https://api.github.test",
            page_size=page_size,
            transport=httpx.MockTransport(self.handler),
        )

    def calls(self, method: str, fragment: str) -> int:
        return sum(1 for r in self.requests if r.method == method and fragment in r.url.path)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def opened_context() -> PullRequestContext:
    return PullRequestContext(OWNER, REPO, PR_NUMBER, PullRequestEvent.OPENED, HEAD_SHA)


@pytest.fixture
def sync_context() -> PullRequestContext:
    return PullRequestContext(OWNER, REPO, PR_NUMBER, PullRequestEvent.SYNCHRONIZE, HEAD_SHA)


@pytest.fixture
def sample_patch() -> str:
    """A GitHub-style patch with context, a replacement, and a pure addition."""
    return textwrap.dedent("""\
        @@ -1,2 +1,3 @@
         package main
        -var a = 1
        +var a = 2
        +var b = 3
        @@ -20,1 +21,3 @@ func main() {
         	run()
        +	// trailing call
        +	cleanup()
    """)


@pytest.fixture
def event_payload(tmp_path):
    """Write an Actions pull_request event payload and return its path."""

    def _write(action: str = "opened", number: int = PR_NUMBER, sha: str = HEAD_SHA) -> str:
        path = tmp_path / "event.json"
        path.write_text(json.dumps({
            "action": action,
            "pull_request": {"number": number, "head": {"sha": sha}},
            "repository": {"full_name": f"{OWNER}/{REPO}"},
        }))
        return str(path)

    return _write
