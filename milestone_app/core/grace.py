"""Grace-period tracking based on when the maintainer last applied a state label."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from .models import EventModel, TrackedObject

LABELED_EVENT = "labeled"


def label_last_applied(events: Iterable[EventModel], bot_name: str, label: str) -> datetime | None:
    """Return when ``bot_name`` most recently applied ``label``.

    Events are expected in chronological order (as listed by the tracker);
    None is returned when no such event is present.
    """
    last: datetime | None = None
    for event in events:
        if event.event != LABELED_EVENT or event.actor != bot_name or event.label != label:
            continue
        if event.created is not None:
            last = event.created
    return last


def grace_period_start(
    obj: TrackedObject,
    events: Iterable[EventModel],
    bot_name: str,
    label: str,
    default_start: datetime,
) -> datetime | None:
    """Start of the grace period for ``label``.

    If the label is not set the grace period starts now (``default_start``).
    If it is set but the history has no record of the bot applying it, the
    start is unknown and None is returned.
    """
    if not obj.has_label(label):
        return default_start
    return label_last_applied(events, bot_name, label)


def grace_period_remaining(
    obj: TrackedObject,
    events: Iterable[EventModel],
    bot_name: str,
    label: str,
    grace_period: timedelta,
    default_start: datetime,
    is_blocker: bool,
    now: datetime,
) -> timedelta | None:
    """Time left before the grace period for ``label`` expires.

    None means there is no deadline: blockers are never removed, and an
    undeterminable start is treated as not yet expired.
    """
    if is_blocker:
        return None
    start = grace_period_start(obj, events, bot_name, label, default_start)
    if start is None:
        return None
    return (start + grace_period) - now


def is_expired(remaining: timedelta | None) -> bool:
    return remaining is not None and remaining <= timedelta(0)
