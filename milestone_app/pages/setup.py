"""Connection setup page: collect GitHub credentials and settings, initialize MilestoneService."""

from __future__ import annotations

import streamlit as st

from milestone_app.app import register_page
from milestone_app.core.config import GITHUB_DEFAULT_ENDPOINT
from milestone_app.core.github_client import DryRunGitHubAPI, TrackerError
from milestone_app.core.service import MilestoneService
from milestone_app.core.settings import DEFAULT_SETTINGS_FILE, ConfigError, load_settings


@register_page("Setup / Connection")
def setup_page():
    st.title("GitHub Connection Setup")
    st.caption("The report always uses a dry-run client: nothing is written to GitHub.")

    gh_secrets = st.secrets.get("github", {})
    secret_endpoint = gh_secrets.get("GITHUB_ENDPOINT") or st.secrets.get("GITHUB_ENDPOINT")
    secret_token = gh_secrets.get("GITHUB_TOKEN") or st.secrets.get("GITHUB_TOKEN")

    endpoint = st.text_input(
        "GitHub API endpoint",
        value=st.session_state.get("github_endpoint") or secret_endpoint or GITHUB_DEFAULT_ENDPOINT,
    )
    token = st.text_input("Token", type="password", value=secret_token or "")
    bot_name = st.text_input("Bot login", value=st.session_state.get("bot_name") or "")
    settings_path = st.text_input(
        "Milestone settings file",
        value=st.session_state.get("settings_path") or DEFAULT_SETTINGS_FILE,
    )
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (endpoint and token and bot_name):
            st.error("Endpoint, token and bot login are required.")
            return
        try:
            settings = load_settings(settings_path)
            api = DryRunGitHubAPI(token, endpoint, bot_name=bot_name)
            st.session_state["github_endpoint"] = endpoint
            st.session_state["bot_name"] = bot_name
            st.session_state["settings_path"] = settings_path
            st.session_state["milestone_service"] = MilestoneService(api, settings)
            st.success("Connection initialized.")
        except (ConfigError, TrackerError) as e:
            st.error(f"Failed to initialize: {e}")

    service = st.session_state.get("milestone_service")
    if service is not None:
        modes = ", ".join(f"{m} ({p.value})" for m, p in service.settings.modes.items()) or "(none)"
        st.info(f"MilestoneService ready. Targeted milestones: {modes}")
