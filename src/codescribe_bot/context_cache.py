"""
TTL cache of tracker issue snapshots.

Entries are evicted lazily on access. A failed fetch yields ``None`` and never
raises, so callers can degrade to a context-free answer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from .logutil import log_event
from .models import IssueContext

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass(frozen=True)
class CacheEntry:
    context: IssueContext
    captured_at: float


class ContextCache:
    def __init__(
        self,
        tracker: Any,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.tracker = tracker
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __contains__(self, issue_id: str) -> bool:
        return issue_id in self._entries

    def invalidate(self, issue_id: str) -> None:
        self._entries.pop(issue_id, None)

    async def get(self, issue_id: str) -> IssueContext | None:
        entry = self._entries.get(issue_id)
        if entry is not None:
            if self.clock() - entry.captured_at < self.ttl_seconds:
                return entry.context
            del self._entries[issue_id]

        try:
            issue = await asyncio.to_thread(self.tracker.fetch_issue, issue_id)
            context = IssueContext.from_issue(issue)
        except Exception as e:
            logger.warning("Context fetch failed for %s", issue_id, exc_info=True)
            log_event("context_fetch_error", issueId=issue_id, error=str(e))
            return None

        self._entries[issue_id] = CacheEntry(context, self.clock())
        log_event("context_cached", issueId=issue_id, state=context.state_name)
        return context
