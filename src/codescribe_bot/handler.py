"""
Mention dispatcher: acknowledge, route, run the command handler, post the reply.

``CodeScribeBot.process`` runs as a detached background task and never raises.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from . import commands, prompts
from .analytics import analyze_progress, render_progress, render_team_insights, team_insights
from .config import Settings
from .context_cache import ContextCache
from .github import GitHubClient, SourceHostError
from .intake import Mention
from .linear import LinearClient, TrackerError
from .llm import BedrockLLM, LLMError
from .logutil import log_event
from .memory import ConversationMemory

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_TOP_P = 0.8
CHAT_MAX_TOKENS = 2048
REVIEW_MAX_TOKENS = 4096
COMMIT_MAX_TOKENS = 1024


class CodeScribeBot:
    def __init__(
        self,
        settings: Settings,
        tracker: Any,
        source: Any,
        llm: Any,
        cache: ContextCache | None = None,
        memory: ConversationMemory | None = None,
    ) -> None:
        self.settings = settings
        self.tracker = tracker
        self.source = source
        self.llm = llm
        self.cache = cache or ContextCache(tracker, ttl_seconds=settings.context_ttl_seconds)
        self.memory = memory or ConversationMemory(self.cache, limit=settings.history_limit)

    # ----- Entry point -----
    async def process(self, mention: Mention) -> None:
        start_ts = time.time()
        try:
            cmd = commands.parse_command(mention.body)
            log_event(
                "command_routed",
                issueId=mention.issue_id,
                commentId=mention.comment_id,
                userId=mention.user_id,
                cmd=cmd["cmd"],
            )
            try:
                await self._post(mention.issue_id, prompts.ack_text(cmd["cmd"]))
            except TrackerError as e:
                logger.exception("Acknowledgement failed")
                log_event("ack_error", issueId=mention.issue_id, error=str(e))
                return
            log_event("ack_ok", issueId=mention.issue_id)

            reply_text = await self.run_command(cmd, mention)

            try:
                await self._post(mention.issue_id, reply_text)
            except TrackerError as e:
                logger.exception("Reply post failed")
                log_event("reply_error", issueId=mention.issue_id, error=str(e))
                return
            log_event(
                "reply_ok",
                issueId=mention.issue_id,
                cmd=cmd["cmd"],
                ms_total=int((time.time() - start_ts) * 1000),
            )
        except Exception as e:
            logger.exception("Mention processing failed")
            log_event("task_failed", issueId=mention.issue_id, error=str(e))

    async def run_command(self, cmd: dict[str, Any], mention: Mention) -> str:
        name = cmd["cmd"]
        if name == "status":
            return self.handle_status()
        if name == "repo":
            return await self.handle_repo()
        if name == "commit":
            return await self.handle_commit()
        if name == "progress":
            return await self.handle_progress(mention.issue_id)
        if name == "team_insights":
            return await self.handle_team_insights(mention.issue_id)
        if name == "chat":
            return await self.handle_chat(mention, cmd.get("text") or mention.body)
        if name == "pr_review":
            return await self.handle_pr_review(cmd["url"])
        return prompts.help_text(self.settings.bot_handle)

    async def _post(self, issue_id: str, body: str) -> None:
        await asyncio.to_thread(self.tracker.create_comment, issue_id, body)

    async def _generate(self, model_id: str, prompt: str, **kwargs: Any) -> str:
        return await asyncio.to_thread(self.llm.generate, model_id, prompt, **kwargs)

    # ----- Handlers -----
    def handle_status(self) -> str:
        s = self.settings
        return prompts.status_report(
            s.llm_fast_model, s.llm_large_model, f"{s.github_owner}/{s.github_repo}"
        )

    async def handle_repo(self) -> str:
        owner, repo = self.settings.github_owner, self.settings.github_repo
        try:
            repo_obj = await asyncio.to_thread(self.source.get_repo, owner, repo)
            recent = await asyncio.to_thread(self.source.list_commits, owner, repo, 5)
        except SourceHostError as e:
            log_event("source_error", cmd="repo", error=str(e))
            return prompts.failure_block(
                "Repository Analysis", f"Could not fetch repository information: {e}"
            )
        return prompts.repo_report(repo_obj, recent)

    async def handle_commit(self) -> str:
        owner, repo = self.settings.github_owner, self.settings.github_repo
        try:
            latest = await asyncio.to_thread(self.source.list_commits, owner, repo, 1)
            if not latest:
                return prompts.failure_block("Commit Analysis", "The repository has no commits yet.")
            details = await asyncio.to_thread(self.source.get_commit, owner, repo, latest[0]["sha"])
        except SourceHostError as e:
            log_event("source_error", cmd="commit", error=str(e))
            return prompts.failure_block(
                "Commit Analysis", f"Could not fetch commit information: {e}"
            )
        try:
            analysis = await self._generate(
                self.llm.fast_model,
                prompts.commit_prompt(details),
                system=prompts.COMMIT_SYSTEM,
                max_tokens=COMMIT_MAX_TOKENS,
            )
        except LLMError as e:
            log_event("llm_failed", cmd="commit", error=str(e))
            analysis = prompts.APOLOGY_TEXT
        return prompts.commit_report(details, analysis)

    async def handle_progress(self, issue_id: str) -> str:
        context = await self.cache.get(issue_id)
        if context is None:
            return prompts.failure_block(
                "Progress Analysis", "Could not load this issue from Linear."
            )
        try:
            comments = await asyncio.to_thread(self.tracker.list_comments, issue_id)
        except TrackerError as e:
            log_event("tracker_error", cmd="progress", issueId=issue_id, error=str(e))
            return prompts.failure_block(
                "Progress Analysis", f"Could not fetch comments for this issue: {e}"
            )
        comments = [c for c in comments if not c.from_viewer]
        report = analyze_progress(
            context, comments, datetime.now(timezone.utc), self.settings.stale_days
        )
        log_event(
            "progress_ok",
            issueId=issue_id,
            percent=report.progress_percent,
            stale=report.is_stale,
            blockers=len(report.blockers),
        )
        return render_progress(report, context)

    async def handle_team_insights(self, issue_id: str) -> str:
        context = await self.cache.get(issue_id)
        if context is None or not context.team_id:
            return prompts.failure_block(
                "Team Insights", "Could not resolve the team for this issue."
            )
        try:
            issues = await asyncio.to_thread(self.tracker.list_team_issues, context.team_id)
        except TrackerError as e:
            log_event("tracker_error", cmd="team_insights", teamId=context.team_id, error=str(e))
            return prompts.failure_block("Team Insights", f"Could not fetch team issues: {e}")
        return render_team_insights(team_insights(issues), context.team_name)

    async def handle_chat(self, mention: Mention, message: str) -> str:
        context = await self.cache.get(mention.issue_id)
        history = self.memory.recent(
            mention.issue_id, mention.user_id, self.settings.history_prompt_count
        )
        prompt = prompts.chat_prompt(context, history, message, mention.user_name)
        try:
            answer = await self._generate(
                self.llm.large_model,
                prompt,
                temperature=CHAT_TEMPERATURE,
                top_p=CHAT_TOP_P,
                max_tokens=CHAT_MAX_TOKENS,
            )
        except LLMError as e:
            log_event("llm_failed", cmd="chat", issueId=mention.issue_id, error=str(e))
            return prompts.APOLOGY_TEXT
        await self.memory.append(mention.issue_id, mention.user_id, message, answer)
        return prompts.chat_reply(answer)

    async def handle_pr_review(self, url: str) -> str:
        try:
            owner, repo, number = commands.parse_pr_url(url)
        except ValueError as e:
            return prompts.failure_block("PR Review", str(e))
        try:
            pull, diff = await asyncio.gather(
                asyncio.to_thread(self.source.get_pull, owner, repo, number),
                asyncio.to_thread(self.source.get_pull_diff, owner, repo, number),
            )
        except SourceHostError as e:
            log_event("source_error", cmd="pr_review", url=url, error=str(e))
            return prompts.failure_block("PR Review", f"Could not fetch the pull request: {e}")
        log_event("pr_fetch_ok", url=url, diff_chars=len(diff))
        prompt = prompts.review_prompt(
            pull, prompts.truncate_diff(diff, self.settings.review_diff_max_chars)
        )
        try:
            review = await self._generate(
                self.llm.large_model,
                prompt,
                system=prompts.REVIEW_SYSTEM,
                max_tokens=REVIEW_MAX_TOKENS,
            )
        except LLMError as e:
            log_event("llm_failed", cmd="pr_review", url=url, error=str(e))
            review = prompts.APOLOGY_TEXT
        return prompts.review_report(pull, url, review)


def build_bot(settings: Settings) -> CodeScribeBot:
    tracker = LinearClient(
        settings.linear_api_url, settings.linear_api_key or "", settings.http_timeout_seconds
    )
    source = GitHubClient(
        settings.github_api_url, settings.github_token or "", settings.http_timeout_seconds
    )
    llm = BedrockLLM(
        settings.llm_fast_model,
        settings.llm_large_model,
        timeout_seconds=settings.llm_timeout_seconds,
        max_retries=settings.llm_max_retries,
    )
    return CodeScribeBot(settings, tracker, source, llm)
