"""
Command routing and rendering utilities.
"""

from __future__ import annotations

import re
from typing import Any

PR_URL_RE = re.compile(r"https://github\.com/[\w-]+/[\w-]+/pull/\d+")
_PR_PARTS_RE = re.compile(r"github\.com/([\w-]+)/([\w-]+)/pull/(\d+)")

# First match wins; order matters.
KEYWORD_ROUTES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("status", ("status", "health")),
    ("repo", ("repo", "repository")),
    ("commit", ("commit", "diff")),
    ("progress", ("progress", "analyze")),
    ("team_insights", ("team", "insights")),
    ("chat", ("chat", "talk", "help me")),
)

COMMANDS = ("status", "repo", "commit", "progress", "team_insights", "chat", "pr_review", "help")


def parse_command(text: str | None) -> dict[str, Any]:
    """Classify a mention comment body into exactly one command."""
    body = (text or "").strip()
    lowered = body.lower()
    for cmd, keywords in KEYWORD_ROUTES:
        if any(k in lowered for k in keywords):
            if cmd == "chat":
                return {"cmd": "chat", "text": body}
            return {"cmd": cmd}
    m = PR_URL_RE.search(body)
    if m:
        return {"cmd": "pr_review", "url": m.group(0)}
    return {"cmd": "help"}


def parse_pr_url(url: str) -> tuple[str, str, int]:
    """Return (owner, repo, number) for a GitHub pull request URL."""
    m = _PR_PARTS_RE.search(url or "")
    if not m:
        raise ValueError(f"Invalid GitHub PR URL format: {url!r}")
    return m.group(1), m.group(2), int(m.group(3))


def first_line(s: str | None) -> str:
    return (s or "").strip().split("\n", 1)[0]


def shorten(s: str, n: int) -> str:
    s = s.strip().replace("\n", " ")
    return s if len(s) <= n else s[: n - 1] + "…"
