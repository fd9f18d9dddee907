"""Streamlit renderers for fault boundary fallbacks."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Final

import streamlit as st

if TYPE_CHECKING:
    from .log_store import LogStore

FALLBACK_RECENT_COUNT: Final[int] = 10
DIALOG_RECENT_COUNT: Final[int] = 20
LOG_PANE_HEIGHT: Final[int] = 200


def render_string_fallback(message: str) -> None:
    """Render a plain string fallback with ``st.error()``."""
    st.error(message)


@st.dialog("Logs", width="large")
def show_logs_dialog(entries: list[str]) -> None:
    st.code("\n".join(entries) or "No logs recorded.", language=None)


def render_default_fallback(
    message: str,
    log_store: LogStore,
    *,
    on_reset: Callable[[], None],
    key: str,
) -> None:
    """Render the built-in recovery panel.

    Shows the error message, a scrollable pane of recent log entries, a
    "View Logs" button opening a dialog with more history, and a "Try Again"
    button wired to ``on_reset``.
    """
    st.error("Something went wrong")
    st.text(message or "Unknown error")

    st.caption("Recent Logs:")
    with st.container(height=LOG_PANE_HEIGHT):
        st.code("\n".join(log_store.get_recent_logs(FALLBACK_RECENT_COUNT)), language=None)

    view_col, retry_col = st.columns(2)
    with view_col:
        if st.button("View Logs", key=f"{key}:view-logs", type="primary"):
            show_logs_dialog(log_store.get_recent_logs(DIALOG_RECENT_COUNT))
    with retry_col:
        st.button("Try Again", key=f"{key}:try-again", on_click=on_reset)
