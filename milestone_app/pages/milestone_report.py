"""Milestone report page.

Runs the maintainer against every open object in the targeted milestones
using the dry-run client and shows the decision for each one.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from milestone_app.app import register_page
from milestone_app.core.config import SETTINGS
from milestone_app.core.github_client import TrackerError
from milestone_app.core.mappers import results_to_dataframe
from milestone_app.core.service import MilestoneService
from milestone_app.visual.charts import state_chart
from milestone_app.visual.progress import ScanProgress
from milestone_app.visual.tables import filter_states, prepare_report_table


@register_page("Milestone Report")
def milestone_report_page():
    st.title("Milestone Report")
    st.caption("Dry-run decisions for issues and pull requests in targeted release milestones.")
    service: MilestoneService | None = st.session_state.get("milestone_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    col_org, col_repo = st.columns(2)
    org = col_org.text_input("Owner", value=st.session_state.get("report_org", ""))
    repo = col_repo.text_input("Repository", value=st.session_state.get("report_repo", ""))
    run = st.button("Evaluate Milestones", type="primary")

    if run:
        if not (org and repo):
            st.error("Owner and repository are required.")
            return
        st.session_state["report_org"] = org
        st.session_state["report_repo"] = repo
        progress = ScanProgress(f"Evaluating {org}/{repo}")
        try:
            results = service.scan(org, repo, progress=progress.callback)
        except TrackerError as exc:
            progress.error(f"Failed to query milestones: {exc}")
            return
        progress.complete(len(results), sum(1 for r in results if not r.ok))
        st.session_state["report_df"] = results_to_dataframe(results)

    report_df = st.session_state.get("report_df", pd.DataFrame())
    if report_df.empty:
        st.info("No report computed yet.")
        return

    chart = state_chart(report_df)
    if chart is not None:
        st.altair_chart(chart, use_container_width=True)

    states = st.multiselect("States", list(SETTINGS.state_order), default=[])
    shown = filter_states(report_df, states)
    prepared, display_cols, cfg = prepare_report_table(shown)
    st.markdown("---")
    if prepared.empty:
        st.info("No objects in the selected states.")
        return
    st.dataframe(
        prepared[display_cols].head(SETTINGS.max_table_rows),
        hide_index=True,
        column_config=cfg,
    )
    csv = prepared[display_cols].to_csv(index=False).encode(SETTINGS.download_encoding)
    st.download_button(
        "Download Report CSV",
        data=csv,
        file_name=f"milestone_report_{st.session_state.get('report_repo', 'repo')}.csv",
        mime="text/csv",
    )
