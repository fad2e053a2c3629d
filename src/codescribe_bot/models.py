"""
Records shared by the cache, memory, analytics and handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp from the tracker (``Z`` suffix allowed)."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value:
        raise ValueError(f"invalid timestamp: {value!r}")
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _name(obj: Any) -> str | None:
    if isinstance(obj, dict):
        nm = obj.get("name") or obj.get("displayName")
        return str(nm) if nm else None
    return None


def _estimate(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class IssueContext:
    title: str
    description: str
    state_name: str
    priority: int
    labels: frozenset[str]
    assignee_name: str | None
    team_name: str
    team_id: str
    project_name: str | None
    cycle_name: str | None
    estimate: float | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_issue(cls, issue: dict[str, Any]) -> "IssueContext":
        team = issue.get("team") or {}
        labels = issue.get("labels") or {}
        label_nodes = labels.get("nodes") if isinstance(labels, dict) else labels
        return cls(
            title=issue.get("title") or "",
            description=issue.get("description") or "",
            state_name=_name(issue.get("state")) or "",
            priority=int(issue.get("priority") or 0),
            labels=frozenset(n for n in (_name(lb) for lb in label_nodes or []) if n),
            assignee_name=_name(issue.get("assignee")),
            team_name=team.get("name") or "",
            team_id=str(team.get("id") or ""),
            project_name=_name(issue.get("project")),
            cycle_name=_name(issue.get("cycle")),
            estimate=_estimate(issue.get("estimate")),
            created_at=parse_timestamp(issue.get("createdAt")),
            updated_at=parse_timestamp(issue.get("updatedAt")),
        )


@dataclass(frozen=True)
class IssueComment:
    body: str
    author_name: str | None
    created_at: datetime
    # Posted by the API key's own user, i.e. the bot.
    from_viewer: bool = False

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "IssueComment":
        user = node.get("user")
        return cls(
            body=node.get("body") or "",
            author_name=_name(user),
            created_at=parse_timestamp(node.get("createdAt")),
            from_viewer=isinstance(user, dict) and bool(user.get("isMe")),
        )


@dataclass(frozen=True)
class TeamIssue:
    state_name: str
    priority: int
    estimate: float | None
    assignee_name: str | None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "TeamIssue":
        return cls(
            state_name=_name(node.get("state")) or "",
            priority=int(node.get("priority") or 0),
            estimate=_estimate(node.get("estimate")),
            assignee_name=_name(node.get("assignee")),
        )


@dataclass(frozen=True)
class Exchange:
    timestamp: datetime
    user_message: str
    bot_response: str
    context: IssueContext | None


@dataclass
class ProgressReport:
    state_name: str
    progress_percent: int
    total_days: int
    last_activity_at: datetime | None
    is_stale: bool
    collaborators: set[str] = field(default_factory=set)
    blockers: list[IssueComment] = field(default_factory=list)
    suggested_next_steps: list[str] = field(default_factory=list)


@dataclass
class TeamInsights:
    total_issues: int
    by_state: dict[str, int]
    by_priority: dict[str, int]
    avg_estimate: float
    top_contributors: list[tuple[str, int]]
