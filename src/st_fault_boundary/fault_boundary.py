"""Fault boundary that isolates failing Streamlit subtrees."""

from __future__ import annotations

import traceback
from collections.abc import Callable, Iterable, MutableMapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from functools import wraps
from typing import Any, ParamSpec, Protocol, TypeVar, cast

from .log_store import LogStore, describe_error, stack_of
from .plugins import render_default_fallback, render_string_fallback

P = ParamSpec("P")
R = TypeVar("R")


class ErrorHook(Protocol):
    """Protocol for error hooks that execute side effects on captured failures.

    Used for audit logging, notifications, metrics collection, etc.
    """

    def __call__(self, exc: Exception, /) -> None:
        """Handle exception with side effects."""
        ...


class FallbackRenderer(Protocol):
    """Protocol for custom fallback UI renderers.

    Receives the captured exception and the component stack describing where
    in the wrapped subtree it was raised.
    """

    def __call__(self, exc: Exception, component_stack: str, /) -> None:
        """Render fallback UI for the exception."""
        ...


class FaultStatus(StrEnum):
    """Whether a boundary shows its subtree or its fallback."""

    HEALTHY = "healthy"
    FAULTED = "faulted"


@dataclass(frozen=True, slots=True)
class CapturedFailure:
    """An exception raised inside a boundary, with the frames that led to it."""

    error: Exception
    component_stack: str

    @property
    def message(self) -> str:
        return describe_error(self.error)

    @property
    def stack(self) -> str:
        trace = stack_of(self.error)
        if not self.component_stack:
            return trace
        return f"{trace}\n\nComponent stack:\n{self.component_stack}".lstrip()


def component_stack_of(exc: BaseException) -> str:
    """List the frames of ``exc`` raised below this module, innermost first."""
    frames = [frame for frame in traceback.extract_tb(exc.__traceback__) if frame.filename != __file__]
    return "\n".join(f"    in {frame.name} ({frame.filename}:{frame.lineno})" for frame in reversed(frames))


class FaultBoundary:
    """Wrap a UI subtree, capture its failures, and render a recovery view instead.

    While healthy the boundary is transparent: ``render`` calls the subtree and
    returns its result. When the subtree raises, the failure is recorded to
    the log store, the boundary becomes faulted, and every following
    ``render`` shows the fallback until ``reset`` is called.

    Args:
        log_store: Store receiving the captured failures, also shown by the
            default fallback.
        fallback: ``None`` for the built-in panel with recent logs and a
            "Try Again" button, a string displayed via ``st.error()``, or a
            callable rendering arbitrary UI.
        on_error: Single hook or iterable of hooks run after a failure has
            been recorded. Hooks are executed in order.
        key: Identifies the boundary's state in ``state`` and prefixes the
            widget keys of the default fallback. Required with ``state``, and
            unique among the boundaries sharing it.
        state: Mapping holding the boundary's state between renders. Pass
            ``st.session_state`` so the state survives Streamlit reruns.

    Example:
        >>> boundary = FaultBoundary(store, key="home", state=st.session_state)
        >>> boundary.render(render_home)

    """

    def __init__(
        self,
        log_store: LogStore,
        *,
        fallback: str | FallbackRenderer | None = None,
        on_error: ErrorHook | Iterable[ErrorHook] = (),
        key: str | None = None,
        state: MutableMapping[str, Any] | None = None,
    ) -> None:
        if state is not None and key is None:
            msg = "key is required when state is shared, e.g. st.session_state"
            raise ValueError(msg)
        key = key or "fault_boundary"
        if callable(on_error):
            hooks: Sequence[ErrorHook] = [on_error]
        else:
            hooks = cast("Sequence[ErrorHook]", list(on_error))
        self._log_store = log_store
        self._fallback = fallback
        self._hooks = hooks
        self._key = key
        self._state_key = f"_fault_boundary:{key}"
        self._state: MutableMapping[str, Any] = state if state is not None else {}

    @property
    def captured_failure(self) -> CapturedFailure | None:
        return self._state.get(self._state_key)

    @property
    def status(self) -> FaultStatus:
        return FaultStatus.HEALTHY if self.captured_failure is None else FaultStatus.FAULTED

    def capture(self, exc: Exception) -> CapturedFailure:
        """Record ``exc`` and switch to the faulted state.

        While already faulted the first failure is kept and returned.
        """
        if (current := self.captured_failure) is not None:
            return current

        failure = CapturedFailure(error=exc, component_stack=component_stack_of(exc))
        self._log_store.error("FaultBoundary caught an error", failure)
        self._state[self._state_key] = failure

        for hook in self._hooks:
            try:
                hook(exc)
            except Exception as hook_exc:  # noqa: BLE001
                # A failing hook must not prevent the fallback from rendering
                self._log_store.error("FaultBoundary error hook failed", hook_exc)
        return failure

    def reset(self) -> None:
        """Discard the captured failure so the next render rebuilds the subtree."""
        if self._state.pop(self._state_key, None) is not None:
            self._log_store.info("FaultBoundary reset", {"key": self._key})

    def render_fallback(self) -> None:
        failure = self.captured_failure
        if failure is None:
            return
        if self._fallback is None:
            render_default_fallback(failure.message, self._log_store, on_reset=self.reset, key=self._key)
        elif callable(self._fallback):
            self._fallback(failure.error, failure.component_stack)
        else:
            render_string_fallback(self._fallback)

    def render(self, subtree: Callable[P, R], *args: P.args, **kwargs: P.kwargs) -> R | None:
        """Render ``subtree`` while healthy, otherwise the fallback.

        Returns the subtree's result, or None when the fallback was shown.
        """
        if self.status is FaultStatus.FAULTED:
            self.render_fallback()
            return None
        try:
            return subtree(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            self.capture(exc)
            self.render_fallback()
            return None

    def decorate(self, func: Callable[P, R]) -> Callable[P, R | None]:
        """Decorator form of ``render``."""

        @wraps(func)
        def _wrapped(*args: P.args, **kwargs: P.kwargs) -> R | None:
            return self.render(func, *args, **kwargs)

        return _wrapped
