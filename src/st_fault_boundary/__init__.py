"""Streamlit fault boundary with a bounded, crash-surviving log store."""

from __future__ import annotations

from .excepthooks import install_excepthook
from .fault_boundary import CapturedFailure, ErrorHook, FallbackRenderer, FaultBoundary, FaultStatus
from .log_store import LogStore, Severity
from .resources import get_log_store

__all__ = [
    "CapturedFailure",
    "ErrorHook",
    "FallbackRenderer",
    "FaultBoundary",
    "FaultStatus",
    "LogStore",
    "Severity",
    "get_log_store",
    "install_excepthook",
]
