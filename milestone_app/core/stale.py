"""Staleness helpers: when did a human last touch an object?"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from .models import CommentModel, EventModel, ObjectHistory, TrackedObject

REOPENED_EVENT = "reopened"


def _last_human_comment(comments: Iterable[CommentModel], bot_name: str, floor: datetime) -> datetime:
    last = floor
    for comment in comments:
        if comment.author == bot_name or comment.updated is None:
            continue
        if comment.updated > last:
            last = comment.updated
    return last


def _last_reopened(events: Iterable[EventModel], floor: datetime) -> datetime:
    last = floor
    for event in events:
        if event.event != REOPENED_EVENT or event.created is None:
            continue
        if event.created > last:
            last = event.created
    return last


def last_modification_time(obj: TrackedObject, history: ObjectHistory) -> datetime:
    """Most recent human activity on ``obj``.

    Considers creation, non-bot issue comments, reopen events and, for pull
    requests, non-bot review comments.
    """
    last = _last_human_comment(history.comments, history.bot_name, obj.created)
    last = max(last, _last_reopened(history.events, obj.created))
    if obj.is_pr:
        last = max(last, _last_human_comment(history.review_comments, history.bot_name, obj.created))
    return last


def update_overdue(last_update: datetime, interval: timedelta, now: datetime) -> bool:
    return now - last_update > interval
