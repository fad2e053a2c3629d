"""
Minimal Linear GraphQL client using stdlib urllib.
"""

from __future__ import annotations

import http.client
import json
import urllib.request
from typing import Any

from .models import IssueComment, TeamIssue


class TrackerError(RuntimeError):
    """A Linear read or comment-create call failed."""


ISSUE_QUERY = """
query Issue($id: String!) {
  issue(id: $id) {
    id
    identifier
    title
    description
    priority
    estimate
    createdAt
    updatedAt
    state { name }
    labels { nodes { name } }
    assignee { name }
    team { id name }
    project { name }
    cycle { name }
  }
}
"""

COMMENTS_QUERY = """
query IssueComments($id: String!, $first: Int!) {
  issue(id: $id) {
    comments(first: $first) {
      nodes { body createdAt user { name isMe } }
    }
  }
}
"""

TEAM_ISSUES_QUERY = """
query TeamIssues($id: String!, $first: Int!, $after: String) {
  team(id: $id) {
    issues(first: $first, after: $after) {
      pageInfo { hasNextPage endCursor }
      nodes {
        priority
        estimate
        state { name }
        assignee { name }
      }
    }
  }
}
"""

COMMENT_CREATE_MUTATION = """
mutation CreateComment($issueId: String!, $body: String!) {
  commentCreate(input: { issueId: $issueId, body: $body }) {
    success
    comment { id }
  }
}
"""


class LinearClient:
    def __init__(self, api_url: str, api_key: str, timeout: int = 10) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout

    # ----- Helpers -----
    def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        body = json.dumps({"query": query, "variables": variables}).encode("utf-8")
        req = urllib.request.Request(
            self.api_url,
            data=body,
            headers={
                "User-Agent": "CodeScribeBot/1.0",
                "Content-Type": "application/json",
                "Authorization": self.api_key,
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                data = json.loads(resp.read().decode("utf-8"))
        except (OSError, http.client.HTTPException, ValueError) as e:
            raise TrackerError(f"Linear request failed: {e}") from e
        if not isinstance(data, dict):
            raise TrackerError("Linear returned a non-object response")
        if data.get("errors"):
            msgs = "; ".join(str((err or {}).get("message")) for err in data["errors"])
            raise TrackerError(f"Linear GraphQL error: {msgs}")
        return data.get("data") or {}

    # ----- Public APIs -----
    def fetch_issue(self, issue_id: str) -> dict[str, Any]:
        data = self._graphql(ISSUE_QUERY, {"id": issue_id})
        issue = data.get("issue")
        if not issue:
            raise TrackerError(f"Issue {issue_id} not found")
        return issue

    def list_comments(self, issue_id: str, count: int = 100) -> list[IssueComment]:
        """Comments on an issue, oldest first."""
        data = self._graphql(COMMENTS_QUERY, {"id": issue_id, "first": count})
        nodes = (((data.get("issue") or {}).get("comments") or {}).get("nodes")) or []
        comments = [IssueComment.from_node(n) for n in nodes if isinstance(n, dict)]
        return sorted(comments, key=lambda c: c.created_at)

    def list_team_issues(self, team_id: str, count: int = 250) -> list[TeamIssue]:
        """Every issue of a team, fetched ``count`` per page."""
        issues: list[TeamIssue] = []
        after = None
        while True:
            data = self._graphql(
                TEAM_ISSUES_QUERY, {"id": team_id, "first": count, "after": after}
            )
            team = data.get("team")
            if not team:
                raise TrackerError(f"Team {team_id} not found")
            conn = team.get("issues") or {}
            nodes = conn.get("nodes") or []
            issues += [TeamIssue.from_node(n) for n in nodes if isinstance(n, dict)]
            page = conn.get("pageInfo") or {}
            after = page.get("endCursor")
            if not page.get("hasNextPage") or not after:
                return issues

    def create_comment(self, issue_id: str, body: str) -> dict[str, Any]:
        data = self._graphql(COMMENT_CREATE_MUTATION, {"issueId": issue_id, "body": body})
        result = data.get("commentCreate") or {}
        if not result.get("success"):
            raise TrackerError(f"commentCreate on {issue_id} was not successful")
        return result
