from datetime import timedelta

import pytest
from conftest import BOT, DAY, NOW, FakeGitHubAPI, make_settings

from milestone_app.core.config import (
    APPROVED_LABEL,
    IN_PROGRESS_LABEL,
    LABELS_INCOMPLETE_LABEL,
    MILESTONE_STATE_LABELS,
    NEEDS_APPROVAL_LABEL,
    REMOVED_LABEL,
)
from milestone_app.core.mappers import map_issue
from milestone_app.core.phase import Phase
from milestone_app.core.policy import MilestoneState
from milestone_app.core.service import MilestoneService, release_milestone
from milestone_app.core.settings import ConfigError, MilestoneSettings

COMPLETE = ["kind/bug", "priority/important-soon", "sig/node"]


def _maintain(api, service, number, now=NOW):
    return service.maintain(map_issue(api.issues[number], "o", "r"), now=now)


def test_release_milestone():
    assert release_milestone("v1.8") == "v1.8"
    assert release_milestone("v1.10.2") == "v1.10.2"
    assert release_milestone("next-candidate") is None
    assert release_milestone(None) is None


def test_service_rejects_invalid_settings():
    with pytest.raises(ConfigError):
        MilestoneService(FakeGitHubAPI(), MilestoneSettings(modes={"v1.8": Phase.DEV}))


def test_ignored_objects():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, milestone=None)
    api.add_issue(2, milestone="v1.7")
    api.add_issue(3, state="closed")
    api.add_issue(4, milestone="backlog")
    for number in (1, 2, 3, 4):
        assert _maintain(api, service, number) is None
    assert api.calls == []


def test_pull_requests_are_maintained():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, is_pr=True)
    result = _maintain(api, service, 1)
    assert result.decision.obj_type == "pull request"
    # Staleness is not checked during development
    assert ("list_review_comments", 1) not in api.calls


def test_blocker_pull_request_review_comments_count_as_activity():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings(Phase.SLUSH))
    labels = ["kind/bug", "priority/critical-urgent", "sig/node", APPROVED_LABEL, IN_PROGRESS_LABEL]
    api.add_issue(1, labels=labels, is_pr=True)
    api.review_comments[1].append(
        {
            "id": 5,
            "user": {"login": "reviewer"},
            "body": "looks close",
            "created_at": (NOW - DAY).isoformat(),
            "updated_at": (NOW - DAY).isoformat(),
        }
    )
    result = _maintain(api, service, 1)
    assert ("list_review_comments", 1) in api.calls
    assert result.decision.state is MilestoneState.CURRENT
    assert "warnUpdateRequired" not in result.decision.section_names


def test_incomplete_labels_first_run():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=["priority/important-soon"], created=NOW)
    result = _maintain(api, service, 1)

    assert result.decision.state is MilestoneState.NEEDS_LABELING
    assert api.labels_of(1) == ["priority/important-soon", LABELS_INCOMPLETE_LABEL]
    assert result.mutations == [f"+{LABELS_INCOMPLETE_LABEL}", "comment"]
    body = api.comments[1][0]["body"]
    assert body.startswith("[MILESTONENOTIFIER] Milestone Issue Labels **Incomplete**")
    assert "within 2 days" in body
    assert "_**kind**_" in body and "_**sig owner**_" in body


def test_second_run_is_idempotent():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=["priority/important-soon"])
    _maintain(api, service, 1)
    api.calls.clear()

    api.clock = NOW + timedelta(minutes=5)
    result = _maintain(api, service, 1, now=api.clock)
    assert result.mutations == []
    assert api.mutations() == []
    assert len(api.comments[1]) == 1


def test_notification_refreshed_after_warning_interval():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings(label_grace_period=10 * DAY))
    api.add_issue(1, labels=["priority/important-soon"])
    _maintain(api, service, 1)
    first_id = api.comments[1][0]["id"]

    api.clock = NOW + DAY + timedelta(hours=1)
    result = _maintain(api, service, 1, now=api.clock)
    assert result.mutations == ["comment"]
    assert [c["id"] for c in api.comments[1]] != [first_id]
    assert len(api.comments[1]) == 1


def test_labels_fixed_moves_to_next_state():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=["priority/important-soon"])
    _maintain(api, service, 1)

    api.issues[1]["labels"] += [{"name": "kind/bug"}, {"name": "sig/node"}]
    result = _maintain(api, service, 1)
    assert result.decision.state is MilestoneState.NEEDS_APPROVAL
    state_labels = [label for label in api.labels_of(1) if label in MILESTONE_STATE_LABELS]
    assert state_labels == [NEEDS_APPROVAL_LABEL]
    assert result.mutations == [f"+{NEEDS_APPROVAL_LABEL}", f"-{LABELS_INCOMPLETE_LABEL}", "comment"]
    assert len(api.comments[1]) == 1


def test_expired_label_grace_removes_from_milestone():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=["priority/important-soon", LABELS_INCOMPLETE_LABEL])
    api.add_label_event(1, LABELS_INCOMPLETE_LABEL, NOW - (3 * DAY + timedelta(hours=1)))

    result = _maintain(api, service, 1)
    assert result.decision.state is MilestoneState.NEEDS_REMOVAL
    assert api.labels_of(1) == ["priority/important-soon", REMOVED_LABEL]
    assert api.issues[1]["milestone"] is None
    assert result.mutations[-1] == "clear-milestone"
    assert "for more than 3 days." in api.comments[1][0]["body"]

    # Out of the milestone, the object is no longer maintained
    assert _maintain(api, service, 1) is None


def test_freeze_removes_non_blocker():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings(Phase.FREEZE))
    api.add_issue(1, labels=COMPLETE + [APPROVED_LABEL, IN_PROGRESS_LABEL])
    result = _maintain(api, service, 1)
    assert result.decision.state is MilestoneState.NEEDS_REMOVAL
    assert ("clear_milestone", 1) in api.calls


def test_current_object_only_gets_one_comment():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=COMPLETE + [APPROVED_LABEL, NEEDS_APPROVAL_LABEL])
    result = _maintain(api, service, 1)
    assert result.decision.state is MilestoneState.CURRENT
    assert result.mutations == [f"-{NEEDS_APPROVAL_LABEL}", "comment"]

    api.clock = NOW + 10 * DAY
    assert _maintain(api, service, 1, now=api.clock).mutations == []


def test_human_comments_are_left_untouched():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=["priority/important-soon"])
    api.add_comment(1, "[MilestoneNotifier] forged by a human", NOW - DAY, author="mallory")
    _maintain(api, service, 1)
    authors = [c["user"]["login"] for c in api.comments[1]]
    assert authors == ["mallory", BOT]


def test_scan_continues_after_tracker_error():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=COMPLETE + [APPROVED_LABEL])
    api.add_issue(2, labels=COMPLETE + [APPROVED_LABEL])
    api.add_issue(3, labels=COMPLETE + [APPROVED_LABEL], milestone="v1.7")
    api.fail_on.add(1)

    seen = []
    results = service.scan("o", "r", now=NOW, progress=lambda msg, done, total: seen.append((done, total)))
    assert [r.obj.number for r in results] == [1, 2]
    assert not results[0].ok
    assert "502" in results[0].error
    assert results[1].ok
    assert results[1].decision.state is MilestoneState.CURRENT
    assert (2, 2) in seen


def test_scan_skips_malformed_search_result():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    del api.add_issue(1)["created_at"]
    api.add_issue(2, labels=COMPLETE + [APPROVED_LABEL])
    results = service.scan("o", "r", now=NOW)
    assert [r.obj.number for r in results] == [2]
    assert results[0].ok


def test_duplicate_notifications_converge_to_one():
    api = FakeGitHubAPI()
    service = MilestoneService(api, make_settings())
    api.add_issue(1, labels=["priority/important-soon"])
    _maintain(api, service, 1)
    api.add_comment(1, api.comments[1][0]["body"], NOW, author=BOT)

    for minutes in (1, 2, 3):
        api.clock = NOW + timedelta(minutes=minutes)
        _maintain(api, service, 1, now=api.clock)
    bot_comments = [c for c in api.comments[1] if c["user"]["login"] == BOT]
    assert len(bot_comments) == 1
