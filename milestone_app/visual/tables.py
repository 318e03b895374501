"""Table helpers for rendering maintainer results in Streamlit."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from milestone_app.core.config import DISPLAY_ORDER_REPORT


def add_object_link(df: pd.DataFrame, url_col: str = "html_url", label: str = "Object"):
    if df.empty or url_col not in df.columns:
        return df, {}
    out = df.copy()
    out[label] = out[url_col].fillna("").astype(str)
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"/(?:issues|pull)/(\d+)$",
            help="Open on GitHub",
            width="small",
        )
    }
    return out, cfg


def prepare_report_table(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}
    table, cfg = add_object_link(df)
    display_cols = [col for col in DISPLAY_ORDER_REPORT if col in table.columns]
    if not display_cols:
        display_cols = [col for col in table.columns if col != "html_url"]
    return table, display_cols, cfg


def filter_states(df: pd.DataFrame, states: list[str] | None) -> pd.DataFrame:
    if df.empty or not states or "state" not in df.columns:
        return df
    return df[df["state"].isin(states)]
