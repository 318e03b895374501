"""Progress reporting for milestone scans in Streamlit."""

from __future__ import annotations

import streamlit as st


class ScanProgress:
    """Banner + progress bar fed by MilestoneService.scan progress callbacks."""

    def __init__(self, title: str):
        self._container = st.container()
        self._container.info(title)
        self._message = self._container.empty()
        self._bar = self._container.progress(0.0)
        self._finished = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._finished:
            return
        self._message.write(message)
        if current is not None and total:
            self._bar.progress(min(max(current / total, 0.0), 1.0))
        else:
            # Unknown total while a milestone query is in flight
            self._bar.progress(0.0)

    def complete(self, processed: int, failed: int) -> None:
        if self._finished:
            return
        self._bar.progress(1.0)
        if failed:
            self._container.warning(f"Evaluated {processed} object(s); {failed} failed (see error column).")
        else:
            self._container.success(f"Evaluated {processed} object(s).")
        self._finished = True

    def error(self, message: str) -> None:
        if self._finished:
            return
        self._container.error(message)
        self._finished = True
