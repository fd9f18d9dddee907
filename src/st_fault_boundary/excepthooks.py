"""Record uncaught exceptions that escape every fault boundary."""

from __future__ import annotations

import sys
import threading
import weakref
from types import TracebackType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from .log_store import LogStore

_installed: weakref.WeakKeyDictionary[LogStore, Callable[[], None]] = weakref.WeakKeyDictionary()


def _record(log_store: LogStore, exc: BaseException, *, is_fatal: bool) -> None:
    log_store.error(f"Global error caught (is_fatal={is_fatal})", exc)


def install_excepthook(log_store: LogStore) -> Callable[[], None]:
    """Chain ``sys.excepthook`` and ``threading.excepthook`` through ``log_store``.

    Main-thread exceptions are recorded as fatal, worker-thread ones as not.
    The previously installed hooks still run afterwards. Returns a function
    restoring them. Installing again for the same store returns that same
    function without chaining a second pair of hooks.
    """
    if (uninstall := _installed.get(log_store)) is not None:
        return uninstall

    previous_sys_hook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def _sys_hook(
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        _record(log_store, exc.with_traceback(tb), is_fatal=True)
        previous_sys_hook(exc_type, exc, tb)

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        if args.exc_value is not None:
            _record(log_store, args.exc_value, is_fatal=False)
        previous_thread_hook(args)

    sys.excepthook = _sys_hook
    threading.excepthook = _thread_hook
    log_store.info("Global error handler set up successfully")

    def _uninstall() -> None:
        _installed.pop(log_store, None)
        sys.excepthook = previous_sys_hook
        threading.excepthook = previous_thread_hook

    _installed[log_store] = _uninstall
    return _uninstall
