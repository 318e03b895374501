"""Chart builders (Altair) for milestone state distribution."""

from __future__ import annotations

import altair as alt
import pandas as pd

from milestone_app.core.config import SETTINGS

STATE_COLORS = {
    "current": "#2ca02c",
    "needs-labeling": "#ff7f0e",
    "needs-approval": "#1f77b4",
    "needs-attention": "#9467bd",
    "needs-removal": "#d62728",
}


def _format_object_list(group: pd.DataFrame) -> str:
    items: list[str] = []
    for _, row in group.iterrows():
        number = row.get("number")
        title = str(row.get("title") or "").strip()
        items.append(f"#{number}: {title}" if title else f"#{number}")
    return "\n".join(items)


def state_counts(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (milestone, state) with a count and the object list."""
    if df.empty or "state" not in df.columns:
        return pd.DataFrame(columns=["milestone", "state", "count", "objects"])
    tmp = df[df["state"].notna()]
    if tmp.empty:
        return pd.DataFrame(columns=["milestone", "state", "count", "objects"])
    agg = (
        tmp.groupby(["milestone", "state"])
        .apply(
            lambda g: pd.Series({"count": int(len(g)), "objects": _format_object_list(g)}),
            include_groups=False,
        )
        .reset_index()
    )
    order = {state: idx for idx, state in enumerate(SETTINGS.state_order)}
    agg["order"] = agg["state"].map(order).fillna(len(order))
    return agg.sort_values(by=["milestone", "order"]).drop(columns=["order"]).reset_index(drop=True)


def state_chart(df: pd.DataFrame):
    counts = state_counts(df)
    if counts.empty:
        return None
    states = list(SETTINGS.state_order)
    chart = (
        alt.Chart(counts)
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Objects"),
            y=alt.Y("milestone:N", title="Milestone"),
            color=alt.Color(
                "state:N",
                sort=states,
                scale=alt.Scale(domain=states, range=[STATE_COLORS[s] for s in states]),
                title="State",
            ),
            order=alt.Order("state:N"),
            tooltip=[
                alt.Tooltip("milestone:N", title="Milestone"),
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip("count:Q", title="Count"),
                alt.Tooltip("objects:N", title="Objects"),
            ],
        )
        .properties(height=220)
    )
    return chart
