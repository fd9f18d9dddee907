"""Process-wide log store shared by every Streamlit session."""

from __future__ import annotations

import streamlit as st

from .log_store import DEFAULT_CAPACITY, LogStore


@st.cache_resource
def get_log_store(capacity: int = DEFAULT_CAPACITY) -> LogStore:
    """Return the log store of this server process, creating it on first use."""
    return LogStore(capacity)
