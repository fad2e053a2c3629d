"""
Configuration helpers and defaults.

Centralize tunables to avoid magic numbers in code/tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v is not None else default


def _int(name: str, default: int) -> int:
    return int(_env(name, str(default)) or default)


@dataclass(frozen=True)
class Settings:
    linear_api_key: str | None
    linear_api_url: str
    github_token: str | None
    github_api_url: str
    github_owner: str
    github_repo: str
    llm_fast_model: str
    llm_large_model: str
    llm_timeout_seconds: int
    llm_max_retries: int
    host: str
    port: int
    public_url: str | None
    bot_handle: str
    context_ttl_seconds: int
    history_limit: int
    history_prompt_count: int
    stale_days: int
    review_diff_max_chars: int
    http_timeout_seconds: int


def load_settings() -> Settings:
    """Load settings from environment with safe defaults for local tests."""

    return Settings(
        linear_api_key=_env("LINEAR_API_KEY"),
        linear_api_url=_env("LINEAR_API_URL", "https://api.linear.app/graphql")
        or "https://api.linear.app/graphql",
        github_token=_env("GITHUB_TOKEN"),
        github_api_url=_env("GITHUB_API_URL", "https://api.github.com")
        or "https://api.github.com",
        github_owner=_env("GITHUB_OWNER", "ManagementMO") or "ManagementMO",
        github_repo=_env("GITHUB_REPO", "CodeScribe") or "CodeScribe",
        llm_fast_model=_env("LLM_FAST_MODEL", "anthropic.claude-3-haiku-20240307-v1:0")
        or "anthropic.claude-3-haiku-20240307-v1:0",
        llm_large_model=_env(
            "LLM_LARGE_MODEL", "anthropic.claude-3-5-sonnet-20240620-v1:0"
        )
        or "anthropic.claude-3-5-sonnet-20240620-v1:0",
        llm_timeout_seconds=_int("LLM_TIMEOUT_SECONDS", 30),
        llm_max_retries=_int("LLM_MAX_RETRIES", 2),
        host=_env("HOST", "0.0.0.0") or "0.0.0.0",  # nosec B104
        port=_int("PORT", 3000),
        public_url=_env("PUBLIC_URL") or _env("NGROK_URL"),
        bot_handle=_env("BOT_HANDLE", "codescribe-agent") or "codescribe-agent",
        context_ttl_seconds=_int("CONTEXT_TTL_SECONDS", 300),
        history_limit=_int("HISTORY_LIMIT", 20),
        history_prompt_count=_int("HISTORY_PROMPT_COUNT", 5),
        stale_days=_int("STALE_DAYS", 7),
        review_diff_max_chars=_int("REVIEW_DIFF_MAX_CHARS", 60000),
        http_timeout_seconds=_int("HTTP_TIMEOUT_SECONDS", 10),
    )


def missing_required(settings: Settings) -> list[str]:
    """Names of required environment variables that are not set."""
    missing: list[str] = []
    if not settings.linear_api_key:
        missing.append("LINEAR_API_KEY")
    if not settings.github_token:
        missing.append("GITHUB_TOKEN")
    return missing
