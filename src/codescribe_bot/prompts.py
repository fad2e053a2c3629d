"""
Prompt assembly and static markdown templates for bot replies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .commands import first_line
from .models import Exchange, IssueContext

APOLOGY_TEXT = (
    "🤖 Sorry, I couldn't come up with an answer right now. "
    "The AI service didn't respond; please try again in a moment."
)

CHAT_PREAMBLE = (
    "You are CodeScribe, a friendly and pragmatic engineering assistant living inside "
    "the team's issue tracker. You can review GitHub pull requests, analyze commits, "
    "summarize repository activity, estimate issue progress and report team insights. "
    "Answer conversationally and concisely in Markdown, ground your answer in the issue "
    "context below, and say so when you are unsure."
)

REVIEW_SYSTEM = (
    "You are an expert, friendly senior code reviewer. Be specific, cite file names, "
    "and prefer actionable suggestions over generic advice."
)

COMMIT_SYSTEM = "You analyze git commits for a software team. Be concise but informative."

ACK_LABELS = {
    "status": "status check",
    "repo": "repository analysis",
    "commit": "commit analysis",
    "progress": "progress analysis",
    "team_insights": "team insights report",
    "chat": "conversation",
    "pr_review": "code review",
    "help": "help guide",
}


def ack_text(cmd: str) -> str:
    return f"🤖 Roger that! I'm starting the {ACK_LABELS.get(cmd, 'task')} now..."


def status_report(fast_model: str, large_model: str, repo_full_name: str) -> str:
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return f"""### 🤖 CodeScribe Status Report

**System Status:** ✅ All systems operational
**Current Time:** {now}
**GitHub API:** ✅ Connected ({repo_full_name})
**Linear API:** ✅ Connected
**AI Models:** ✅ {fast_model} / {large_model} ready
**Webhook:** ✅ Receiving notifications

Ready to assist with code reviews and automation! 🚀"""


def help_text(handle: str) -> str:
    h = f"@{handle}"
    return f"""### 🤖 CodeScribe Agent Help

I can help you with several commands:

**⚡ Health Check:**
- `{h} status` - Check system status

**📊 Repository Analysis:**
- `{h} repo` - Get repository stats and recent commits

**📝 Commit Analysis:**
- `{h} commit` - Analyze the latest commit with AI

**📈 Progress Analysis:**
- `{h} progress` - Progress, staleness, blockers and next steps for this issue

**👥 Team Insights:**
- `{h} team insights` - Workload by state, priority and assignee for this issue's team

**💬 Chat:**
- `{h} chat <message>` - Talk with me about this issue (I remember our recent conversation)

**🔍 Code Review:**
- `{h} [GitHub PR URL]` - Review a pull request

**Examples:**
- `{h} status`
- `{h} progress`
- `{h} chat what should I tackle first?`
- `{h} https://github.com/owner/repo/pull/123`

Try any of these commands to test my capabilities! 🚀"""


def _date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    if not value:
        return "Unknown"
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime(fmt)
    except ValueError:
        return str(value)


def repo_report(repo: dict[str, Any], commits: list[dict[str, Any]]) -> str:
    commit_lines = [
        f"- {first_line((c.get('commit') or {}).get('message'))} "
        f"({((c.get('commit') or {}).get('author') or {}).get('name') or 'unknown'})"
        for c in commits
    ]
    return f"""### 📊 Repository Analysis

**Repository:** {repo.get('full_name')}
**Description:** {repo.get('description') or 'No description'}
**Language:** {repo.get('language') or 'Unknown'}
**Stars:** ⭐ {repo.get('stargazers_count', 0)}
**Forks:** 🍴 {repo.get('forks_count', 0)}
**Last Updated:** {_date(repo.get('updated_at'))}

**Recent Commits:**
{chr(10).join(commit_lines) or '- No commits found'}

**Repository Stats:**
- Open Issues: {repo.get('open_issues_count', 0)}
- Default Branch: {repo.get('default_branch')}
- Size: {repo.get('size', 0)} KB"""


def failure_block(title: str, message: str) -> str:
    return f"### ❌ {title} Failed\n\n{message}"


def commit_prompt(commit: dict[str, Any]) -> str:
    info = commit.get("commit") or {}
    files = commit.get("files") or []
    changes = "\n".join(
        f"{f.get('filename')}: +{f.get('additions', 0)} -{f.get('deletions', 0)}" for f in files
    )
    return (
        "Analyze this git commit and provide insights about the changes made. "
        "Be concise but informative.\n\n"
        f"Commit Message: {info.get('message') or ''}\n"
        f"Author: {(info.get('author') or {}).get('name') or 'unknown'}\n"
        f"Files Changed: {len(files)}\n\n"
        f"Changes:\n{changes}"
    )


def commit_report(commit: dict[str, Any], analysis: str) -> str:
    info = commit.get("commit") or {}
    author = info.get("author") or {}
    stats = commit.get("stats") or {}
    return f"""### 📝 Latest Commit Analysis

**Commit:** {(commit.get('sha') or '')[:7]}
**Author:** {author.get('name') or 'unknown'}
**Date:** {_date(author.get('date'), '%Y-%m-%d %H:%M')}
**Message:** {info.get('message') or ''}

**Files Changed:** {len(commit.get('files') or [])}
**Additions:** +{stats.get('additions', 0)}
**Deletions:** -{stats.get('deletions', 0)}

### 🤖 AI Analysis
{analysis}"""


def _context_lines(context: IssueContext | None) -> list[str]:
    if context is None:
        return ["(Issue details are currently unavailable.)"]
    lines = [
        f"Title: {context.title}",
        f"State: {context.state_name}",
        f"Priority: {context.priority}",
        f"Team: {context.team_name}",
        f"Assignee: {context.assignee_name or 'Unassigned'}",
    ]
    if context.labels:
        lines.append("Labels: " + ", ".join(sorted(context.labels)))
    if context.project_name:
        lines.append(f"Project: {context.project_name}")
    if context.cycle_name:
        lines.append(f"Cycle: {context.cycle_name}")
    if context.estimate is not None:
        lines.append(f"Estimate: {context.estimate}")
    lines.append(f"Created: {context.created_at:%Y-%m-%d}, Updated: {context.updated_at:%Y-%m-%d}")
    if context.description:
        lines.append(f"Description: {context.description[:1500]}")
    return lines


def chat_prompt(
    context: IssueContext | None, history: list[Exchange], message: str, user_name: str
) -> str:
    parts = [CHAT_PREAMBLE, "", "## Issue context", *_context_lines(context)]
    if history:
        parts += ["", "## Recent conversation"]
        for ex in history:
            parts.append(f"User: {ex.user_message}")
            parts.append(f"You: {ex.bot_response}")
    parts += ["", "## New message", f"{user_name or 'User'}: {message}", "", "You:"]
    return "\n".join(parts)


def chat_reply(answer: str) -> str:
    return f"### 💬 CodeScribe Chat\n\n{answer}"


def review_prompt(pull: dict[str, Any], diff: str) -> str:
    return f"""Review the following GitHub pull request.

Title: {pull.get('title') or ''}
Author: {(pull.get('user') or {}).get('login') or 'unknown'}
Description: {(pull.get('body') or 'No description')[:2000]}
Files changed: {pull.get('changed_files', 0)} (+{pull.get('additions', 0)} / -{pull.get('deletions', 0)})

Respond in Markdown with exactly these sections:
#### 🧹 Code Quality
#### 🐛 Potential Bugs
#### 🔒 Security
#### ⚡ Performance
#### 💡 Suggestions
#### ✅ Overall Assessment

Diff:
```diff
{diff}
```"""


def review_report(pull: dict[str, Any], url: str, review: str) -> str:
    return f"""### 🔍 Enhanced CodeScribe PR Review

**PR:** [#{pull.get('number')} {pull.get('title') or ''}]({pull.get('html_url') or url})
**Author:** @{(pull.get('user') or {}).get('login') or 'unknown'}
**Branch:** `{(pull.get('head') or {}).get('ref') or '?'}` → `{(pull.get('base') or {}).get('ref') or '?'}`
**Files Changed:** {pull.get('changed_files', 0)}
**Lines:** +{pull.get('additions', 0)} / -{pull.get('deletions', 0)}

{review}"""


def truncate_diff(diff: str, max_chars: int) -> str:
    if len(diff) <= max_chars:
        return diff
    return diff[:max_chars] + "\n... (diff truncated)"
