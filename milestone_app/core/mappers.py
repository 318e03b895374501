"""Mapping raw GitHub JSON into domain models, and results into DataFrames."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any

import pandas as pd

from .config import RESULT_CORE_COLUMNS
from .models import CommentModel, EventModel, TrackedObject

if TYPE_CHECKING:
    from .service import MaintainResult


def parse_dt(val) -> datetime | None:
    if not val:
        return None
    ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _login(user: Any) -> str | None:
    if isinstance(user, dict):
        return user.get("login")
    return None


def map_comment(raw: dict[str, Any]) -> CommentModel:
    created = parse_dt(raw.get("created_at"))
    return CommentModel(
        id=raw.get("id"),
        author=_login(raw.get("user")),
        body=raw.get("body"),
        created=created,
        updated=parse_dt(raw.get("updated_at")) or created,
    )


def map_event(raw: dict[str, Any]) -> EventModel:
    label = raw.get("label") or {}
    return EventModel(
        event=raw.get("event"),
        actor=_login(raw.get("actor")),
        created=parse_dt(raw.get("created_at")),
        label=label.get("name") if isinstance(label, dict) else None,
    )


def map_issue(raw: dict[str, Any], org: str, repo: str) -> TrackedObject:
    milestone = raw.get("milestone") or {}
    labels = []
    for item in raw.get("labels") or []:
        name = item.get("name") if isinstance(item, dict) else item
        if isinstance(name, str) and name:
            labels.append(name)
    created = parse_dt(raw.get("created_at"))
    if created is None:
        raise ValueError(f"{org}/{repo}#{raw.get('number')}: missing created_at")
    return TrackedObject(
        org=org,
        repo=repo,
        number=int(raw["number"]),
        title=raw.get("title"),
        state=raw.get("state") or "open",
        milestone=milestone.get("title") if isinstance(milestone, dict) else None,
        created=created,
        is_pr="pull_request" in raw,
        html_url=raw.get("html_url"),
        labels=labels,
    )


def results_to_dataframe(results: Iterable[MaintainResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        decision = r.decision
        rows.append(
            {
                "org": r.obj.org,
                "repo": r.obj.repo,
                "number": r.obj.number,
                "title": r.obj.title,
                "html_url": r.obj.html_url,
                "obj_type": r.obj.obj_type,
                "milestone": r.milestone,
                "phase": r.phase.value if r.phase else None,
                "state": decision.state.value if decision else None,
                "label": r.change.label if r.change else None,
                "sections": ", ".join(sorted(decision.section_names)) if decision else "",
                "remove_from_milestone": bool(r.change and r.change.remove_from_milestone),
                "mutations": ", ".join(r.mutations),
                "error": r.error,
            }
        )
    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=list(RESULT_CORE_COLUMNS))
    return df.sort_values(by=["milestone", "number"], na_position="last").reset_index(drop=True)
