"""Convenience launcher for the Streamlit milestone report.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``milestone_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

from importlib import import_module
from pathlib import Path

import streamlit as st

from milestone_app.app import main

st.set_page_config(layout="wide")


def _auto_init_milestone_service():
    """Initialize a dry-run MilestoneService from Streamlit secrets if available."""
    if "milestone_service" in st.session_state:
        return

    # Try to get secrets from a [github] section, fall back to top-level
    gh_secrets = st.secrets.get("github", {})
    token = gh_secrets.get("GITHUB_TOKEN") or st.secrets.get("GITHUB_TOKEN")
    bot_name = gh_secrets.get("GITHUB_BOT_NAME") or st.secrets.get("GITHUB_BOT_NAME")
    endpoint = gh_secrets.get("GITHUB_ENDPOINT") or st.secrets.get("GITHUB_ENDPOINT")
    settings_path = gh_secrets.get("MILESTONE_SETTINGS") or st.secrets.get("MILESTONE_SETTINGS")

    if token and bot_name:
        st.sidebar.info("Secrets found, attempting to connect to GitHub...")
        from milestone_app.core.config import GITHUB_DEFAULT_ENDPOINT
        from milestone_app.core.github_client import DryRunGitHubAPI, TrackerError
        from milestone_app.core.service import MilestoneService
        from milestone_app.core.settings import ConfigError, load_settings

        try:
            settings = load_settings(settings_path)
            api = DryRunGitHubAPI(token, endpoint or GITHUB_DEFAULT_ENDPOINT, bot_name=bot_name)
            st.session_state["bot_name"] = bot_name
            st.session_state["milestone_service"] = MilestoneService(api, settings)
            st.sidebar.success("GitHub connection ready (dry run).")
        except (ConfigError, TrackerError) as e:
            st.sidebar.error(f"GitHub setup failed: {e}")
            # Clear any partial state to ensure user is directed to setup
            st.session_state.pop("milestone_service", None)
    else:
        st.sidebar.warning("GitHub secrets not found. Please use the Setup page.")


_auto_init_milestone_service()

PAGES_DIR = Path(__file__).parent / "milestone_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"milestone_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except ImportError as e:
        print(f"Failed importing page {mod_name}: {e}")

if __name__ == "__main__":
    main()
