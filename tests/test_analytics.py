from datetime import datetime, timedelta, timezone

import pytest

from codescribe_bot.analytics import (
    analyze_progress,
    find_blockers,
    progress_percent,
    render_progress,
    render_team_insights,
    team_insights,
)
from codescribe_bot.models import IssueContext, TeamIssue

from conftest import make_comment, make_issue

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def context(**overrides) -> IssueContext:
    base = make_issue(
        createdAt="2026-10-09T06:00:00.000Z",
        updatedAt="2026-10-18T12:00:00.000Z",
    )
    base.update(overrides)
    return IssueContext.from_issue(base)


def test_todo_issue_without_details():
    report = analyze_progress(context(), [], NOW)
    assert report.progress_percent == 10
    assert report.suggested_next_steps == [
        "Move to In Progress when you start working",
        "Break down into smaller subtasks if complex",
        "Add story point estimate for better planning",
        "Add initial comment with approach or questions",
    ]
    assert report.last_activity_at is None
    assert report.collaborators == set()
    assert report.blockers == []


def test_total_days_is_floored():
    report = analyze_progress(context(), [], NOW)
    assert report.total_days == 10


def test_staleness_and_in_progress_steps():
    ctx = context(state={"name": "In Progress"}, updatedAt="2026-10-01T00:00:00Z", estimate=2)
    report = analyze_progress(ctx, [make_comment("started")], NOW)
    assert report.is_stale is True
    assert report.suggested_next_steps == [
        "Assign someone to this issue",
        "Issue seems stale - consider updating status or adding progress comment",
    ]


def test_custom_stale_threshold():
    ctx = context(updatedAt="2026-10-17T00:00:00Z")
    assert analyze_progress(ctx, [], NOW, stale_days=7).is_stale is False
    assert analyze_progress(ctx, [], NOW, stale_days=1).is_stale is True


@pytest.mark.parametrize("state", ["Backlog", "Todo", "In Progress", "In Review", "Done", "Weird"])
def test_progress_is_bounded_and_monotone(state):
    base = progress_percent(state, 0, None, None)
    more_comments = progress_percent(state, 6, None, None)
    with_estimate = progress_percent(state, 6, 3, None)
    assigned = progress_percent(state, 6, 3, "Bob")
    values = [base, more_comments, with_estimate, assigned]
    assert values == sorted(values)
    assert all(0 <= v <= 100 for v in values)


def test_progress_clamps_at_100():
    assert progress_percent("Done", 10, 5, "Bob") == 100
    assert progress_percent("In Review", 10, 5, "Bob") == 95
    assert progress_percent("Todo", 5, 0, None) == 10


def test_collaborators_and_last_activity():
    comments = [
        make_comment("first", "Alice", days_ago=3),
        make_comment("second", "Bob", days_ago=2),
        make_comment("third", "Alice", days_ago=1),
    ]
    report = analyze_progress(context(), comments, NOW)
    assert report.collaborators == {"Alice", "Bob"}
    assert report.last_activity_at == comments[-1].created_at


def test_blockers_keep_last_three_in_order():
    comments = [
        make_comment("We are BLOCKED on auth"),
        make_comment("all good"),
        make_comment("stuck on tests"),
        make_comment("waiting for review"),
        make_comment("dependency bump needed"),
    ]
    blockers = find_blockers(comments)
    assert [b.body for b in blockers] == [
        "stuck on tests",
        "waiting for review",
        "dependency bump needed",
    ]
    assert find_blockers([make_comment("looks fine")]) == []


def test_team_insights_grouping():
    issues = [
        TeamIssue(state_name="Todo", priority=0, estimate=None, assignee_name="A"),
        TeamIssue(state_name="Done", priority=2, estimate=3, assignee_name="B"),
        TeamIssue(state_name="Done", priority=2, estimate=5, assignee_name="B"),
    ]
    insights = team_insights(issues)
    assert insights.total_issues == 3
    assert insights.by_priority == {"None": 1, "Medium": 2}
    assert insights.by_state == {"Todo": 1, "Done": 2}
    assert insights.avg_estimate == 4.0
    assert insights.top_contributors == [("B", 2), ("A", 1)]


def test_team_insights_avg_and_ties():
    issues = [
        TeamIssue("Todo", 1, 1, "Zed"),
        TeamIssue("Todo", 3, 2, "Amy"),
        TeamIssue("Todo", 4, 2, None),
        TeamIssue("Todo", 4, 0, "Kim"),
    ]
    insights = team_insights(issues)
    assert insights.avg_estimate == round(5 / 3, 1)
    assert insights.top_contributors == [("Zed", 1), ("Amy", 1), ("Kim", 1)]
    assert insights.by_priority == {"Low": 1, "High": 1, "Urgent": 2}


def test_team_insights_empty():
    insights = team_insights([])
    assert insights.avg_estimate == 0
    assert insights.top_contributors == []


def test_top_contributors_capped_at_five():
    issues = [TeamIssue("Todo", 0, None, f"user{i}") for i in range(8)]
    assert len(team_insights(issues).top_contributors) == 5


def test_renderers():
    ctx = context()
    text = render_progress(analyze_progress(ctx, [make_comment("blocked by infra")], NOW), ctx)
    assert text.startswith("### 📈 Progress Analysis")
    assert "blocked by infra" in text
    out = render_team_insights(team_insights([TeamIssue("Done", 2, 3, "B")]), "Core")
    assert "Team Insights: Core" in out
    assert "- Medium: 1" in out
