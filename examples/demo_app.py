from __future__ import annotations

import logging
import platform

import streamlit as st

from st_fault_boundary import FaultBoundary, LogStore, get_log_store, install_excepthook

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

store = get_log_store()
install_excepthook(store)


def fail_tab_change() -> None:
    """Callback that raises an error - recorded by store.wrap_callback."""
    msg = "tab change failed"
    raise RuntimeError(msg)


def render_home(log_store: LogStore) -> None:
    st.title("Hello, world!")
    st.subheader("Debug Info:")
    st.text(f"Dark Mode: {'ON' if st.session_state.get('dark_mode') else 'OFF'}")
    st.text(f"Platform: {platform.system()}")

    if st.toggle("Dark mode", key="dark_mode"):
        log_store.info("Theme toggled", {"dark_mode": True})

    if st.button("Break this panel"):
        # Caught by the home boundary, which swaps in its fallback
        _ = 1 / 0

    st.button("Break a callback", on_click=log_store.wrap_callback(fail_tab_change, "Error changing tab"))

    with st.expander("View Recent Logs"):
        st.code("\n".join(log_store.get_recent_logs(10)), language=None)


def render_settings(log_store: LogStore) -> None:
    st.title("Settings Page")
    st.text(f"Logs Count: {len(log_store)}")
    st.download_button("Export All Logs", log_store.export_logs(), file_name="logs.txt")
    if st.button("Clear Logs"):
        log_store.clear_logs()
        st.success("Logs cleared")


home_tab, settings_tab = st.tabs(["Home", "Settings"])

with home_tab:
    FaultBoundary(store, key="home", state=st.session_state).render(render_home, store)

with settings_tab:
    FaultBoundary(
        store,
        key="settings",
        state=st.session_state,
        fallback=lambda exc, _: st.error(f"Settings Screen Error: {exc}"),
    ).render(render_settings, store)
