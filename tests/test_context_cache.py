import asyncio

from codescribe_bot.context_cache import ContextCache

from conftest import FakeTracker, make_issue


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_hit_within_ttl_fetches_once():
    tracker = FakeTracker()
    clock = Clock()
    cache = ContextCache(tracker, ttl_seconds=300, clock=clock)

    first = asyncio.run(cache.get("issue-1"))
    clock.now += 299
    second = asyncio.run(cache.get("issue-1"))

    assert first is not None
    assert first == second
    assert tracker.fetch_count == 1


def test_expired_entry_is_refetched():
    tracker = FakeTracker()
    clock = Clock()
    cache = ContextCache(tracker, ttl_seconds=300, clock=clock)

    asyncio.run(cache.get("issue-1"))
    tracker.issue = make_issue(state={"name": "Done"})
    clock.now += 300
    ctx = asyncio.run(cache.get("issue-1"))

    assert tracker.fetch_count == 2
    assert ctx.state_name == "Done"


def test_fetch_failure_returns_none_and_is_not_cached():
    tracker = FakeTracker()
    tracker.fail_fetch = True
    cache = ContextCache(tracker)

    assert asyncio.run(cache.get("issue-1")) is None
    assert "issue-1" not in cache


def test_unparseable_issue_returns_none():
    tracker = FakeTracker(issue=make_issue(createdAt=None))
    cache = ContextCache(tracker)
    assert asyncio.run(cache.get("issue-1")) is None


def test_projection_fields():
    tracker = FakeTracker(
        issue=make_issue(
            estimate=3,
            assignee={"name": "Bob"},
            cycle={"name": "Cycle 4"},
            labels={"nodes": [{"name": "bug"}, {"name": "api"}]},
        )
    )
    ctx = asyncio.run(ContextCache(tracker).get("issue-1"))
    assert ctx.title == "Add webhook retries"
    assert ctx.state_name == "Todo"
    assert ctx.priority == 2
    assert ctx.labels == frozenset({"bug", "api"})
    assert ctx.assignee_name == "Bob"
    assert ctx.team_id == "team-1"
    assert ctx.team_name == "Core"
    assert ctx.project_name == "Bot"
    assert ctx.cycle_name == "Cycle 4"
    assert ctx.estimate == 3.0
    assert ctx.created_at.tzinfo is not None


def test_invalidate_forces_refetch():
    tracker = FakeTracker()
    cache = ContextCache(tracker)
    asyncio.run(cache.get("issue-1"))
    cache.invalidate("issue-1")
    asyncio.run(cache.get("issue-1"))
    assert tracker.fetch_count == 2
