from datetime import datetime, timedelta, timezone

import pytest

from codescribe_bot.config import load_settings
from codescribe_bot.handler import CodeScribeBot
from codescribe_bot.intake import Mention
from codescribe_bot.linear import TrackerError
from codescribe_bot.llm import LLMError
from codescribe_bot.models import IssueComment


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def make_issue(**overrides):
    now = datetime.now(timezone.utc)
    issue = {
        "id": "issue-1",
        "identifier": "COD-1",
        "title": "Add webhook retries",
        "description": "Linear sometimes retries deliveries.",
        "priority": 2,
        "estimate": None,
        "createdAt": iso(now - timedelta(days=3)),
        "updatedAt": iso(now - timedelta(hours=1)),
        "state": {"name": "Todo"},
        "labels": {"nodes": [{"name": "backend"}]},
        "assignee": None,
        "team": {"id": "team-1", "name": "Core"},
        "project": {"name": "Bot"},
        "cycle": None,
    }
    issue.update(overrides)
    return issue


def make_comment(body: str, author: str = "Alice", days_ago: float = 1.0) -> IssueComment:
    return IssueComment(
        body=body,
        author_name=author,
        created_at=datetime.now(timezone.utc) - timedelta(days=days_ago),
    )


class FakeTracker:
    def __init__(self, issue=None, comments=None, team_issues=None):
        self.issue = issue if issue is not None else make_issue()
        self.comments = list(comments or [])
        self.team_issues = list(team_issues or [])
        self.posted = []
        self.fetch_count = 0
        self.team_requests = []
        self.fail_fetch = False

    def fetch_issue(self, issue_id: str):
        self.fetch_count += 1
        if self.fail_fetch:
            raise TrackerError("linear down")
        return dict(self.issue)

    def list_comments(self, issue_id: str, count: int = 100):
        return list(self.comments)

    def list_team_issues(self, team_id: str, count: int = 250):
        self.team_requests.append(team_id)
        return list(self.team_issues)

    def create_comment(self, issue_id: str, body: str):
        self.posted.append((issue_id, body))
        return {"success": True}


class FakeSource:
    def __init__(self):
        self.calls = []

    def get_repo(self, owner: str, repo: str):
        self.calls.append(("get_repo", owner, repo))
        return {
            "full_name": f"{owner}/{repo}",
            "description": "AI scribe",
            "language": "Python",
            "stargazers_count": 12,
            "forks_count": 3,
            "updated_at": "2026-10-01T10:00:00Z",
            "open_issues_count": 4,
            "default_branch": "main",
            "size": 512,
        }

    def list_commits(self, owner: str, repo: str, per_page: int = 5):
        self.calls.append(("list_commits", per_page))
        commits = [
            {"sha": "abcdef1234567", "commit": {"message": "Fix parser\n\nlong body", "author": {"name": "Dana"}}},
            {"sha": "1234567abcdef", "commit": {"message": "Add tests", "author": {"name": "Eli"}}},
        ]
        return commits[:per_page]

    def get_commit(self, owner: str, repo: str, sha: str):
        self.calls.append(("get_commit", sha))
        return {
            "sha": sha,
            "commit": {
                "message": "Fix parser",
                "author": {"name": "Dana", "date": "2026-10-02T09:30:00Z"},
            },
            "stats": {"additions": 10, "deletions": 2},
            "files": [
                {"filename": "src/parser.py", "additions": 8, "deletions": 2},
                {"filename": "tests/test_parser.py", "additions": 2, "deletions": 0},
            ],
        }


class FakeLLM:
    fast_model = "fast-model"
    large_model = "large-model"

    def __init__(self, reply: str = "OK", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.calls = []

    def generate(self, model_id: str, prompt: str, **kwargs):
        self.calls.append({"model": model_id, "prompt": prompt, **kwargs})
        if self.fail:
            raise LLMError("bedrock down")
        return f"{self.reply} #{len(self.calls)}"


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("LINEAR_API_KEY", "lin_test")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("GITHUB_OWNER", "ManagementMO")
    monkeypatch.setenv("GITHUB_REPO", "CodeScribe")
    return load_settings()


@pytest.fixture
def tracker():
    return FakeTracker()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def bot(settings, tracker, source, llm):
    return CodeScribeBot(settings, tracker, source, llm)


@pytest.fixture
def mention():
    def _make(body: str, issue_id: str = "issue-1", user_id: str = "user-1"):
        return Mention(
            issue_id=issue_id,
            comment_id="comment-1",
            user_id=user_id,
            user_name="Alice",
            body=body,
        )

    return _make
