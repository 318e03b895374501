"""Reconcilers: translate a milestone change into minimal tracker mutations.

Both reconcilers are idempotent. Running them again against an object that
already reflects the change performs no mutating calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta

from .config import MILESTONE_NOTIFIER_NAME, MILESTONE_STATE_LABELS
from .github_client import GitHubAPI
from .models import CommentModel, TrackedObject
from .notification import Notification, parse_notification

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


def notification_comments(
    comments: Iterable[CommentModel],
    bot_name: str,
    name: str = MILESTONE_NOTIFIER_NAME,
) -> list[tuple[CommentModel, Notification]]:
    """Every bot comment carrying the ``name`` notification, newest first.

    Comments without a creation time sort last; ties keep the later listed
    comment first.
    """
    found: list[tuple[CommentModel, Notification]] = []
    for comment in comments:
        if comment.author != bot_name:
            continue
        notification = parse_notification(comment.body)
        if notification is None or not notification.matches(name):
            continue
        found.append((comment, notification))
    return sorted(reversed(found), key=lambda item: item[0].created or _OLDEST, reverse=True)


def notification_comment(
    comments: Iterable[CommentModel],
    bot_name: str,
    name: str = MILESTONE_NOTIFIER_NAME,
) -> tuple[CommentModel | None, Notification | None]:
    """The newest bot comment carrying the ``name`` notification."""
    found = notification_comments(comments, bot_name, name)
    if not found:
        return None, None
    return found[0]


def notification_is_current(
    new: Notification,
    old: Notification | None,
    old_comment: CommentModel | None,
    interval: timedelta | None,
    now: datetime,
) -> bool:
    """True when ``old`` equals ``new`` and the refresh interval has not elapsed."""
    if old is None or old != new:
        return False
    if interval is None:
        return True
    if old_comment is None or old_comment.created is None:
        return False
    return now - old_comment.created < interval


def reconcile_notification(
    api: GitHubAPI,
    obj: TrackedObject,
    notification: Notification,
    comments: Sequence[CommentModel],
    bot_name: str,
    interval: timedelta | None,
    now: datetime,
) -> list[str]:
    """Make ``notification`` the object's single notifier comment.

    Duplicate notifier comments are deleted on every pass. Returns the
    mutations performed: ``"-comment"`` per duplicate removed and ``"comment"``
    when a new comment was posted.
    """
    found = notification_comments(comments, bot_name, notification.name)
    performed: list[str] = []
    for duplicate, _ in found[1:]:
        if duplicate.id is None:
            continue
        api.delete_comment(obj.org, obj.repo, duplicate.id)
        performed.append("-comment")
    if performed:
        logger.info("Removed %d duplicate notification(s) on %s/%s#%d", len(performed), obj.org, obj.repo, obj.number)

    comment, old = found[0] if found else (None, None)
    if notification_is_current(notification, old, comment, interval, now):
        logger.debug("Notification on %s/%s#%d is current", obj.org, obj.repo, obj.number)
        return performed
    if comment is not None and comment.id is not None:
        api.delete_comment(obj.org, obj.repo, comment.id)
    api.create_comment(obj.org, obj.repo, obj.number, str(notification))
    logger.info("Posted milestone notification on %s/%s#%d", obj.org, obj.repo, obj.number)
    performed.append("comment")
    return performed


def update_state_label(
    api: GitHubAPI,
    obj: TrackedObject,
    label: str,
    state_labels: Sequence[str] = MILESTONE_STATE_LABELS,
) -> list[str]:
    """Ensure ``label`` is the only state label on ``obj``.

    An empty ``label`` removes every state label. ``obj.labels`` is updated
    in place to mirror the tracker. Returns the mutations performed, e.g.
    ``["+milestone/needs-approval", "-milestone/incomplete-labels"]``.
    """
    performed: list[str] = []
    if label and not obj.has_label(label):
        api.add_label(obj.org, obj.repo, obj.number, label)
        obj.labels.append(label)
        performed.append(f"+{label}")
    for state_label in state_labels:
        if state_label == label or not obj.has_label(state_label):
            continue
        api.remove_label(obj.org, obj.repo, obj.number, state_label)
        obj.labels.remove(state_label)
        performed.append(f"-{state_label}")
    return performed
