"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import milestone_app` works. Also provides an in-memory
GitHub fake that records every call.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from milestone_app.core.github_client import GitHubAPI, TrackerError  # noqa: E402
from milestone_app.core.settings import MilestoneSettings  # noqa: E402
from milestone_app.core.phase import Phase  # noqa: E402

BOT = "test-bot"
NOW = datetime(2024, 9, 20, 12, 0, tzinfo=UTC)
DAY = timedelta(days=1)


def iso(dt: datetime) -> str:
    return dt.isoformat()


class FakeGitHubAPI(GitHubAPI):
    """In-memory GitHub keyed by issue number.

    Mutations update the stored state the way GitHub would, including the
    ``labeled`` event the bot leaves behind, so consecutive runs see the
    result of earlier ones.
    """

    def __init__(self, clock: datetime = NOW, bot: str = BOT):
        self.endpoint = "https://api.example.test"
        self._bot_name = bot
        self.clock = clock
        self.issues: dict[int, dict] = {}
        self.comments: dict[int, list[dict]] = {}
        self.events: dict[int, list[dict]] = {}
        self.review_comments: dict[int, list[dict]] = {}
        self.calls: list[tuple] = []
        self.fail_on: set[int] = set()
        self._next_comment_id = 1000

    # ------------------ Fixtures ------------------
    def add_issue(
        self,
        number: int,
        labels: list[str] | None = None,
        milestone: str | None = "v1.8",
        created: datetime | None = None,
        state: str = "open",
        is_pr: bool = False,
    ) -> dict:
        raw = {
            "number": number,
            "title": f"Object {number}",
            "state": state,
            "created_at": iso(created or self.clock - 28 * DAY),
            "html_url": f"https://github.com/o/r/{'pull' if is_pr else 'issues'}/{number}",
            "labels": [{"name": name} for name in labels or []],
            "milestone": {"title": milestone} if milestone else None,
        }
        if is_pr:
            raw["pull_request"] = {"url": "https://api.example.test/pr"}
        self.issues[number] = raw
        self.comments.setdefault(number, [])
        self.events.setdefault(number, [])
        self.review_comments.setdefault(number, [])
        return raw

    def add_label_event(self, number: int, label: str, created: datetime, actor: str = BOT) -> None:
        self.events.setdefault(number, []).append(
            {"event": "labeled", "actor": {"login": actor}, "label": {"name": label}, "created_at": iso(created)}
        )

    def add_comment(self, number: int, body: str, created: datetime, author: str = "someone") -> dict:
        self._next_comment_id += 1
        comment = {
            "id": self._next_comment_id,
            "user": {"login": author},
            "body": body,
            "created_at": iso(created),
            "updated_at": iso(created),
        }
        self.comments.setdefault(number, []).append(comment)
        return comment

    def labels_of(self, number: int) -> list[str]:
        return [item["name"] for item in self.issues[number]["labels"]]

    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] not in {"list_comments", "list_events", "list_review_comments"}]

    def _check(self, number: int) -> None:
        if number in self.fail_on:
            raise TrackerError(f"GET issue {number} failed 502: bad gateway")

    # ------------------ Reads ------------------
    def bot_name(self) -> str:
        return self._bot_name

    def get_issue(self, org, repo, number):
        self._check(number)
        return self.issues[number]

    def find_issues(self, org, repo, milestone):
        return [
            raw
            for raw in self.issues.values()
            if raw["state"] == "open" and (raw.get("milestone") or {}).get("title") == milestone
        ]

    def list_comments(self, org, repo, number):
        self._check(number)
        self.calls.append(("list_comments", number))
        return list(self.comments.get(number, []))

    def list_events(self, org, repo, number):
        self._check(number)
        self.calls.append(("list_events", number))
        return list(self.events.get(number, []))

    def list_review_comments(self, org, repo, number):
        self._check(number)
        self.calls.append(("list_review_comments", number))
        return list(self.review_comments.get(number, []))

    # ------------------ Mutations ------------------
    def add_label(self, org, repo, number, label):
        self.calls.append(("add_label", number, label))
        self.issues[number]["labels"].append({"name": label})
        self.add_label_event(number, label, self.clock, actor=self._bot_name)

    def remove_label(self, org, repo, number, label):
        self.calls.append(("remove_label", number, label))
        self.issues[number]["labels"] = [i for i in self.issues[number]["labels"] if i["name"] != label]

    def create_comment(self, org, repo, number, body):
        self.calls.append(("create_comment", number))
        self.add_comment(number, body, self.clock, author=self._bot_name)

    def delete_comment(self, org, repo, comment_id):
        self.calls.append(("delete_comment", comment_id))
        for number, comments in self.comments.items():
            self.comments[number] = [c for c in comments if c["id"] != comment_id]

    def edit_comment(self, org, repo, comment_id, body):
        self.calls.append(("edit_comment", comment_id))

    def clear_milestone(self, org, repo, number):
        self.calls.append(("clear_milestone", number))
        self.issues[number]["milestone"] = None


def make_settings(phase: Phase = Phase.DEV, **overrides) -> MilestoneSettings:
    values = {
        "modes": {"v1.8": phase},
        "warning_interval": DAY,
        "label_grace_period": 3 * DAY,
        "approval_grace_period": 7 * DAY,
        "slush_update_interval": 3 * DAY,
        "freeze_update_interval": DAY,
        "freeze_date": "the time heck freezes over",
    }
    values.update(overrides)
    return MilestoneSettings(**values).validate()


@pytest.fixture
def api():
    return FakeGitHubAPI()


@pytest.fixture
def settings():
    return make_settings()
