"""Bounded in-memory log buffer that survives component failures."""

from __future__ import annotations

import json
import logging
import threading
import traceback
from collections import deque
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import StrEnum
from functools import wraps
from typing import Any, Final, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

DEFAULT_CAPACITY: Final[int] = 1000
DEFAULT_RECENT_COUNT: Final[int] = 50

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    """Tag classifying a log entry."""

    LOG = "LOG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    STACK = "STACK"


_LEVELS: Final[dict[Severity, int]] = {
    Severity.LOG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.STACK: logging.ERROR,
}


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _format_timestamp(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_data(data: Any) -> str:
    """Render a log payload as display-safe text without raising."""
    if data is None:
        return ""
    try:
        return json.dumps(data, ensure_ascii=False, default=str)
    except Exception:  # noqa: BLE001
        pass
    try:
        return str(data)
    except Exception:  # noqa: BLE001
        return f"<unserializable {type(data).__name__}>"


def _message_of(error: Any) -> str:
    if isinstance(error, Mapping):
        message = error.get("message")
    elif isinstance(error, BaseException):
        message = str(error)
    else:
        message = getattr(error, "message", None)
        if callable(message):
            message = None
    return str(message) if message else ""


def _string_form(error: Any) -> str:
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception_only(error)).strip()
    return str(error)


def describe_error(error: Any) -> str:
    """Describe an error as message, then string form, then JSON, then ``""``."""
    if error is None:
        return ""
    for describe in (_message_of, _string_form, json.dumps):
        try:
            text = describe(error)
        except Exception:  # noqa: BLE001, S112
            continue
        if text:
            return text
    return ""


def stack_of(error: Any) -> str:
    """Return the stack trace carried by ``error``, or ``""`` when there is none."""
    if error is None:
        return ""
    if isinstance(error, BaseException):
        if error.__traceback__ is None:
            return ""
        return "".join(traceback.format_exception(error)).rstrip()
    try:
        stack = error.get("stack") if isinstance(error, Mapping) else getattr(error, "stack", None)
        return str(stack) if stack else ""
    except Exception:  # noqa: BLE001
        return ""


class LogStore:
    """Append-only ring buffer of formatted log entries.

    One instance is meant to be created at process start and passed to every
    call site. Writes and reads are serialized by an internal lock, so
    eviction and append stay atomic for callers on any thread.

    Args:
        capacity: Maximum number of retained entries. Older entries are evicted
            first once the buffer is full.
        clock: Returns the current time; entries are stamped with it in UTC.

    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, *, clock: Callable[[], datetime] = _utc_now) -> None:
        if capacity <= 0:
            msg = f"capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._entries: deque[str] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._clock = clock

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _entry(self, severity: Severity, text: str, stamp: str | None = None) -> tuple[Severity, str]:
        return severity, f"[{stamp or _format_timestamp(self._clock())}] {severity}: {text}"

    def _append(self, *entries: tuple[Severity, str], clear: bool = False) -> None:
        with self._lock:
            if clear:
                self._entries.clear()
            self._entries.extend(text for _, text in entries)
        for severity, text in entries:
            logger.log(_LEVELS[severity], "%s", text)

    def log(self, message: str, data: Any = None) -> None:
        self._append(self._entry(Severity.LOG, f"{message} {serialize_data(data)}"))

    def info(self, message: str, data: Any = None) -> None:
        self._append(self._entry(Severity.INFO, f"{message} {serialize_data(data)}"))

    def warn(self, message: str, data: Any = None) -> None:
        self._append(self._entry(Severity.WARN, f"{message} {serialize_data(data)}"))

    def error(self, message: str, error: Any = None) -> None:
        """Record an error, followed by a separate ``STACK`` entry when it carries a trace."""
        stamp = _format_timestamp(self._clock())
        entries = [self._entry(Severity.ERROR, f"{message} {describe_error(error)}", stamp)]
        if stack := stack_of(error):
            entries.append(self._entry(Severity.STACK, stack, stamp))
        self._append(*entries)

    def get_logs(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def get_recent_logs(self, count: int = DEFAULT_RECENT_COUNT) -> list[str]:
        if count <= 0:
            return []
        with self._lock:
            return list(self._entries)[-count:]

    def clear_logs(self) -> None:
        self._append(self._entry(Severity.INFO, "Logs cleared "), clear=True)

    def export_logs(self) -> str:
        with self._lock:
            return "\n".join(self._entries)

    def wrap_callback(self, func: Callable[P, R], message: str | None = None) -> Callable[P, R | None]:
        """Wrap an event callback so its exceptions are recorded instead of raised.

        Fault boundaries only see failures raised while they render. Callbacks
        such as ``st.button(on_click=...)`` run before the script does, so they
        need to record their own failures.
        """
        label = message or f"Error in {getattr(func, '__name__', 'callback')}"

        @wraps(func)
        def _wrapped(*args: P.args, **kwargs: P.kwargs) -> R | None:
            try:
                return func(*args, **kwargs)
            except Exception as exc:  # noqa: BLE001
                self.error(label, exc)
                return None

        return _wrapped
