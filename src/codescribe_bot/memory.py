"""
Short-term conversation memory keyed by (issue id, user id).
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone

from .context_cache import ContextCache
from .models import Exchange

DEFAULT_HISTORY_LIMIT = 20


class ConversationMemory:
    def __init__(self, cache: ContextCache, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self.cache = cache
        self.limit = limit
        self._logs: dict[tuple[str, str], deque[Exchange]] = {}

    async def append(
        self, issue_id: str, user_id: str, user_message: str, bot_response: str
    ) -> Exchange:
        context = await self.cache.get(issue_id)
        exchange = Exchange(
            timestamp=datetime.now(timezone.utc),
            user_message=user_message,
            bot_response=bot_response,
            context=context,
        )
        log = self._logs.setdefault((issue_id, user_id), deque(maxlen=self.limit))
        log.append(exchange)
        return exchange

    def recent(self, issue_id: str, user_id: str, k: int = 5) -> list[Exchange]:
        """Most recent ``k`` exchanges, oldest first."""
        if k <= 0:
            return []
        log = self._logs.get((issue_id, user_id))
        if not log:
            return []
        return list(log)[-k:]

    def size(self, issue_id: str, user_id: str) -> int:
        return len(self._logs.get((issue_id, user_id)) or ())
