"""
Workflow analytics derived from tracker data: issue progress and team roll-ups.

Everything here is pure; callers pass ``now`` explicitly.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta

from .commands import shorten
from .models import IssueComment, IssueContext, ProgressReport, TeamInsights, TeamIssue

STATE_PROGRESS = {
    "Backlog": 0,
    "Todo": 10,
    "In Progress": 50,
    "In Review": 80,
    "Done": 100,
}

PRIORITY_LABELS = {0: "None", 1: "Low", 2: "Medium", 3: "High", 4: "Urgent"}

BLOCKER_KEYWORDS = ("blocked", "blocker", "stuck", "waiting", "issue", "problem", "dependency")

MAX_BLOCKERS = 3
MAX_CONTRIBUTORS = 5
DEFAULT_STALE_DAYS = 7


def progress_percent(
    state_name: str, comment_count: int, estimate: float | None, assignee_name: str | None
) -> int:
    pct = STATE_PROGRESS.get(state_name, 0)
    if comment_count > 5:
        pct += 5
    if estimate is not None and estimate > 0:
        pct += 5
    if assignee_name:
        pct += 5
    return max(0, min(100, pct))


def find_blockers(comments: list[IssueComment], limit: int = MAX_BLOCKERS) -> list[IssueComment]:
    """Last ``limit`` comments mentioning a blocker keyword, in original order."""
    if limit <= 0:
        return []
    hits = [c for c in comments if any(k in c.body.lower() for k in BLOCKER_KEYWORDS)]
    return hits[-limit:]


def suggest_next_steps(
    context: IssueContext, comment_count: int, is_stale: bool
) -> list[str]:
    steps: list[str] = []
    state = context.state_name
    if state == "Todo":
        steps.append("Move to In Progress when you start working")
        steps.append("Break down into smaller subtasks if complex")
    if state == "In Progress" and not context.assignee_name:
        steps.append("Assign someone to this issue")
    if context.estimate is None:
        steps.append("Add story point estimate for better planning")
    if comment_count == 0:
        steps.append("Add initial comment with approach or questions")
    if state == "In Progress" and is_stale:
        steps.append("Issue seems stale - consider updating status or adding progress comment")
    return steps


def analyze_progress(
    context: IssueContext,
    comments: list[IssueComment],
    now: datetime,
    stale_days: int = DEFAULT_STALE_DAYS,
) -> ProgressReport:
    is_stale = (now - context.updated_at) > timedelta(days=stale_days)
    return ProgressReport(
        state_name=context.state_name,
        progress_percent=progress_percent(
            context.state_name, len(comments), context.estimate, context.assignee_name
        ),
        total_days=max(0, (now - context.created_at).days),
        last_activity_at=comments[-1].created_at if comments else None,
        is_stale=is_stale,
        collaborators={c.author_name for c in comments if c.author_name},
        blockers=find_blockers(comments),
        suggested_next_steps=suggest_next_steps(context, len(comments), is_stale),
    )


def team_insights(issues: list[TeamIssue]) -> TeamInsights:
    by_state: Counter[str] = Counter()
    by_priority: Counter[str] = Counter()
    contributors: Counter[str] = Counter()
    estimates: list[float] = []
    for issue in issues:
        by_state[issue.state_name or "Unknown"] += 1
        by_priority[PRIORITY_LABELS.get(issue.priority, "None")] += 1
        if issue.assignee_name:
            contributors[issue.assignee_name] += 1
        if issue.estimate is not None and issue.estimate > 0:
            estimates.append(issue.estimate)

    avg = round(sum(estimates) / len(estimates), 1) if estimates else 0.0
    return TeamInsights(
        total_issues=len(issues),
        by_state=dict(by_state),
        by_priority=dict(by_priority),
        avg_estimate=avg,
        # most_common is stable, so ties keep first-seen order
        top_contributors=contributors.most_common(MAX_CONTRIBUTORS),
    )


# ---------- Markdown rendering ----------


def render_progress(report: ProgressReport, context: IssueContext) -> str:
    filled = report.progress_percent // 10
    bar = "█" * filled + "░" * (10 - filled)
    last = report.last_activity_at
    lines = [
        "### 📈 Progress Analysis",
        "",
        f"**Issue:** {context.title}",
        f"**State:** {report.state_name or 'Unknown'}",
        f"**Progress:** {bar} {report.progress_percent}%",
        f"**Age:** {report.total_days} day{'s' if report.total_days != 1 else ''}",
        f"**Last Activity:** {last.strftime('%Y-%m-%d %H:%M') if last else 'No comments yet'}",
        f"**Assignee:** {context.assignee_name or 'Unassigned'}",
        f"**Estimate:** {context.estimate if context.estimate is not None else 'Not set'}",
    ]
    if report.is_stale:
        lines.append("**Status:** ⚠️ Stale (no updates recently)")
    if report.collaborators:
        lines.append("**Collaborators:** " + ", ".join(sorted(report.collaborators)))
    if report.blockers:
        lines += ["", "**🚧 Potential Blockers:**"]
        for b in report.blockers:
            who = f" ({b.author_name})" if b.author_name else ""
            lines.append(f"- {shorten(b.body, 140)}{who}")
    if report.suggested_next_steps:
        lines += ["", "**🎯 Suggested Next Steps:**"]
        lines += [f"- {s}" for s in report.suggested_next_steps]
    return "\n".join(lines)


def render_team_insights(insights: TeamInsights, team_name: str) -> str:
    lines = [
        f"### 👥 Team Insights: {team_name or 'Team'}",
        "",
        f"**Total Issues:** {insights.total_issues}",
        f"**Average Estimate:** {insights.avg_estimate} points",
    ]
    if insights.by_state:
        lines += ["", "**By State:**"]
        lines += [f"- {k}: {v}" for k, v in insights.by_state.items()]
    if insights.by_priority:
        lines += ["", "**By Priority:**"]
        lines += [f"- {k}: {v}" for k, v in insights.by_priority.items()]
    if insights.top_contributors:
        lines += ["", "**Top Contributors:**"]
        lines += [
            f"{i}. {name} ({count} issue{'s' if count != 1 else ''})"
            for i, (name, count) in enumerate(insights.top_contributors, 1)
        ]
    return "\n".join(lines)
