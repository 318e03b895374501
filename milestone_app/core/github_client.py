"""GitHub REST v3 client wrapper (issues, comments, events, labels, milestones)."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from .config import GITHUB_DEFAULT_ENDPOINT, GITHUB_PAGE_SIZE, GITHUB_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class TrackerError(RuntimeError):
    """Raised when a call to the issue tracker fails."""


class GitHubAPI:
    def __init__(
        self,
        token: str,
        endpoint: str = GITHUB_DEFAULT_ENDPOINT,
        *,
        bot_name: str | None = None,
        timeout: float = GITHUB_TIMEOUT_SECONDS,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        # Identity is stable for the lifetime of the token
        self._bot_name = bot_name

    # ------------------ Transport ------------------
    def _request(self, method: str, path_or_url: str, **kwargs) -> requests.Response:
        url = path_or_url if path_or_url.startswith("http") else f"{self.endpoint}{path_or_url}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TrackerError(f"{method} {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise TrackerError(f"{method} {url} failed {resp.status_code}: {resp.text[:200]}")
        return resp

    def _json(self, method: str, resp: requests.Response, url: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise TrackerError(f"{method} {url} returned invalid JSON: {exc}") from exc

    def _get_paginated(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        qp = {"per_page": GITHUB_PAGE_SIZE}
        if params:
            qp.update(params)
        out: list[dict[str, Any]] = []
        url: str | None = path
        while url:
            resp = self._request("GET", url, params=qp)
            data = self._json("GET", resp, url)
            if isinstance(data, dict):
                # Search endpoints wrap results
                data = data.get("items", [])
            out.extend(data)
            url = resp.links.get("next", {}).get("url")
            # The next link already carries the query string
            qp = None
        return out

    # ------------------ Reads ------------------
    def bot_name(self) -> str:
        if self._bot_name is None:
            data = self._json("GET", self._request("GET", "/user"), "/user")
            login = data.get("login") if isinstance(data, dict) else None
            if not login:
                raise TrackerError("unable to determine bot identity from /user")
            self._bot_name = login
        return self._bot_name

    def get_issue(self, org: str, repo: str, number: int) -> dict[str, Any]:
        path = f"/repos/{org}/{repo}/issues/{number}"
        return self._json("GET", self._request("GET", path), path)

    def find_issues(self, org: str, repo: str, milestone: str) -> list[dict[str, Any]]:
        """Open issues and pull requests in ``milestone``."""
        query = f'repo:{org}/{repo} state:open milestone:"{milestone}"'
        return self._get_paginated("/search/issues", {"q": query})

    def list_comments(self, org: str, repo: str, number: int) -> list[dict[str, Any]]:
        return self._get_paginated(f"/repos/{org}/{repo}/issues/{number}/comments")

    def list_events(self, org: str, repo: str, number: int) -> list[dict[str, Any]]:
        return self._get_paginated(f"/repos/{org}/{repo}/issues/{number}/events")

    def list_review_comments(self, org: str, repo: str, number: int) -> list[dict[str, Any]]:
        return self._get_paginated(f"/repos/{org}/{repo}/pulls/{number}/comments")

    # ------------------ Mutations ------------------
    def add_label(self, org: str, repo: str, number: int, label: str) -> None:
        self._request("POST", f"/repos/{org}/{repo}/issues/{number}/labels", json={"labels": [label]})

    def remove_label(self, org: str, repo: str, number: int, label: str) -> None:
        self._request("DELETE", f"/repos/{org}/{repo}/issues/{number}/labels/{quote(label, safe='')}")

    def create_comment(self, org: str, repo: str, number: int, body: str) -> None:
        self._request("POST", f"/repos/{org}/{repo}/issues/{number}/comments", json={"body": body})

    def delete_comment(self, org: str, repo: str, comment_id: int) -> None:
        self._request("DELETE", f"/repos/{org}/{repo}/issues/comments/{comment_id}")

    def edit_comment(self, org: str, repo: str, comment_id: int, body: str) -> None:
        self._request("PATCH", f"/repos/{org}/{repo}/issues/comments/{comment_id}", json={"body": body})

    def clear_milestone(self, org: str, repo: str, number: int) -> None:
        self._request("PATCH", f"/repos/{org}/{repo}/issues/{number}", json={"milestone": None})


class DryRunGitHubAPI(GitHubAPI):
    """Reads from GitHub but only logs mutations."""

    def add_label(self, org, repo, number, label):
        logger.info("DRY-RUN add label %s to %s/%s#%d", label, org, repo, number)

    def remove_label(self, org, repo, number, label):
        logger.info("DRY-RUN remove label %s from %s/%s#%d", label, org, repo, number)

    def create_comment(self, org, repo, number, body):
        logger.info("DRY-RUN create comment on %s/%s#%d", org, repo, number)

    def delete_comment(self, org, repo, comment_id):
        logger.info("DRY-RUN delete comment %d in %s/%s", comment_id, org, repo)

    def edit_comment(self, org, repo, comment_id, body):
        logger.info("DRY-RUN edit comment %d in %s/%s", comment_id, org, repo)

    def clear_milestone(self, org, repo, number):
        logger.info("DRY-RUN clear milestone on %s/%s#%d", org, repo, number)
