"""
FastAPI webhook listener for Linear agent notifications.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Request

from .config import Settings, load_settings
from .handler import CodeScribeBot, build_bot
from .intake import Accepted, HandshakeResponse, MalformedEvent, parse_event
from .logutil import log_event

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, bot: CodeScribeBot | None = None) -> FastAPI:
    settings = settings or load_settings()
    bot = bot or build_bot(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_event(
            "server_start",
            port=settings.port,
            repo=f"{settings.github_owner}/{settings.github_repo}",
            webhook=(settings.public_url.rstrip("/") + "/api/webhook")
            if settings.public_url
            else None,
        )
        yield
        log_event("server_stop")

    app = FastAPI(title="CodeScribe Bot", lifespan=lifespan)
    app.state.bot = bot

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/webhook")
    async def webhook(request: Request, background_tasks: BackgroundTasks):
        raw = await request.body()
        try:
            payload = json.loads(raw.decode("utf-8") or "{}")
        except ValueError:
            log_event("webhook_ignored", reason="invalid_json")
            return {"result": "ignored", "reason": "invalid JSON body"}

        try:
            result = parse_event(payload)
        except MalformedEvent as e:
            log_event("webhook_malformed", error=str(e))
            return {"result": "ignored", "reason": str(e)}

        if isinstance(result, HandshakeResponse):
            log_event("webhook_challenge")
            return {"challenge": result.challenge}
        if isinstance(result, Accepted):
            mention = result.mention
            log_event(
                "webhook_accepted",
                issueId=mention.issue_id,
                commentId=mention.comment_id,
                userId=mention.user_id,
            )
            background_tasks.add_task(bot.process, mention)
            return {"result": "accepted"}

        log_event("webhook_ignored", reason=result.reason)
        return {"result": "ignored", "reason": result.reason}

    return app
