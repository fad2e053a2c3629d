"""
Minimal GitHub REST client (v3) using stdlib urllib.
"""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


class SourceHostError(RuntimeError):
    """A GitHub API call failed."""


class GitHubClient:
    def __init__(self, api_url: str, token: str, timeout: int = 10) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    # ----- Helpers -----
    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = self.api_url + path
        if params:
            url += "?" + urllib.parse.urlencode(params)
        return url

    def _request(self, url: str, accept: str = "application/vnd.github+json") -> bytes:
        req = urllib.request.Request(
            url,
            headers={
                "User-Agent": "CodeScribeBot/1.0",
                "Accept": accept,
                "Authorization": f"Bearer {self.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                return resp.read()
        except urllib.error.HTTPError as e:
            raise SourceHostError(f"GitHub {e.code} for {url}: {e.reason}") from e
        except (OSError, http.client.HTTPException) as e:
            raise SourceHostError(f"GitHub request failed for {url}: {e}") from e

    def _get_json(self, url: str) -> Any:
        data = self._request(url)
        try:
            return json.loads(data.decode("utf-8"))
        except ValueError as e:
            raise SourceHostError(f"GitHub returned invalid JSON for {url}") from e

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{urllib.parse.quote(owner)}/{urllib.parse.quote(repo)}"

    # ----- Public APIs -----
    def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        return self._get_json(self._url(self._repo_path(owner, repo)))

    def list_commits(self, owner: str, repo: str, per_page: int = 5) -> list[dict[str, Any]]:
        url = self._url(self._repo_path(owner, repo) + "/commits", {"per_page": per_page})
        data = self._get_json(url)
        return list(data) if isinstance(data, list) else []

    def get_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        url = self._url(self._repo_path(owner, repo) + f"/commits/{urllib.parse.quote(sha)}")
        return self._get_json(url)

    def get_pull(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        return self._get_json(self._url(self._repo_path(owner, repo) + f"/pulls/{int(number)}"))

    def get_pull_diff(self, owner: str, repo: str, number: int) -> str:
        url = self._url(self._repo_path(owner, repo) + f"/pulls/{int(number)}")
        return self._request(url, accept=DIFF_MEDIA_TYPE).decode("utf-8", errors="replace")
