"""
Webhook event classification: handshake, mention notification, or ignorable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

CHALLENGE_TYPE = "WebhookChallenge"
NOTIFICATION_TYPE = "AppUserNotification"
MENTION_ACTION = "issueCommentMention"


class MalformedEvent(ValueError):
    """A recognized notification is missing required fields."""


@dataclass(frozen=True)
class Mention:
    issue_id: str
    comment_id: str
    user_id: str
    user_name: str
    body: str


@dataclass(frozen=True)
class HandshakeResponse:
    challenge: str


@dataclass(frozen=True)
class Accepted:
    mention: Mention


@dataclass(frozen=True)
class Ignored:
    reason: str


IntakeResult = Union[HandshakeResponse, Accepted, Ignored]


def _require(obj: Any, *path: str) -> Any:
    cur = obj
    for key in path:
        if not isinstance(cur, dict) or cur.get(key) in (None, ""):
            raise MalformedEvent("missing field: " + ".".join(path))
        cur = cur[key]
    return cur


def parse_event(payload: Any) -> IntakeResult:
    if not isinstance(payload, dict):
        return Ignored("payload is not an object")

    event_type = payload.get("type")
    if event_type == CHALLENGE_TYPE:
        return HandshakeResponse(str(payload.get("challenge") or ""))

    action = payload.get("action")
    if event_type != NOTIFICATION_TYPE or action != MENTION_ACTION:
        return Ignored(f"unhandled event {event_type}/{action}")

    notification = _require(payload, "notification")
    body = _require(notification, "comment", "body")
    if not isinstance(body, str):
        raise MalformedEvent("comment.body is not a string")
    return Accepted(
        Mention(
            issue_id=str(_require(notification, "issueId")),
            comment_id=str(_require(notification, "commentId")),
            user_id=str(_require(notification, "user", "id")),
            user_name=str(_require(notification, "user", "name")),
            body=body,
        )
    )
