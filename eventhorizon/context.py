"""Request contexts carrying values, deadlines and cancellation, and their marshaling."""

from __future__ import annotations

import enum
import threading
import time
from typing import Any, Callable, Hashable

DEFAULT_NAMESPACE = "default"
"""The namespace used when none is set in the context."""

DEFAULT_MIN_VERSION_DEADLINE = 10.0
"""Seconds allowed to a context created by with_min_version_wait."""

NAMESPACE_KEY_STR = "eh_namespace"
MIN_VERSION_KEY_STR = "eh_minversion"


class ContextError(Exception):
    """Raised when a context is no longer usable."""


class Cancelled(ContextError):
    """Raised when a context has been cancelled."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(ContextError):
    """Raised when a context's deadline has passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class _ContextKey(enum.Enum):
    NAMESPACE = enum.auto()
    MIN_VERSION = enum.auto()


class Context:
    """An immutable set of values with an optional deadline and cancellation.

    Derived contexts see the values, deadline and cancellation of the context
    they were derived from.
    """

    __slots__ = ("_values", "_deadline", "_events", "_own")

    def __init__(
        self,
        values: dict[Hashable, Any] | None = None,
        deadline: float | None = None,
        events: tuple[threading.Event, ...] = (),
        own: threading.Event | None = None,
    ) -> None:
        self._values = dict(values or {})
        self._deadline = deadline
        self._events = events
        self._own = own

    def with_value(self, key: Hashable, value: Any) -> "Context":
        """Return a child context with a value set for a key."""
        return Context(
            {**self._values, key: value}, self._deadline, self._events, self._own
        )

    def value(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for a key, or the default."""
        return self._values.get(key, default)

    def with_timeout(self, seconds: float) -> "Context":
        """Return a cancellable child context that expires after some seconds."""
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        own = threading.Event()
        return Context(self._values, deadline, self._events + (own,), own)

    def with_cancel(self) -> "Context":
        """Return a child context that can be cancelled on its own."""
        own = threading.Event()
        return Context(self._values, self._deadline, self._events + (own,), own)

    def cancel(self) -> None:
        """Cancel this context and those derived from it.

        Has no effect on a context that was never made cancellable.
        """
        if self._own is not None:
            self._own.set()

    def remaining(self) -> float | None:
        """Return the seconds left until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def done(self) -> bool:
        """Return True once the context is cancelled or past its deadline."""
        try:
            self.check()
        except ContextError:
            return True
        return False

    def check(self) -> None:
        """Raise Cancelled or DeadlineExceeded if the context is done."""
        if any(event.is_set() for event in self._events):
            raise Cancelled()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise DeadlineExceeded()

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


_BACKGROUND = Context()


def background() -> Context:
    """Return the empty root context."""
    return _BACKGROUND


def namespace_from_context(ctx: Context) -> str:
    """Return the namespace in the context, or the default namespace."""
    namespace = ctx.value(_ContextKey.NAMESPACE)
    return namespace if isinstance(namespace, str) else DEFAULT_NAMESPACE


def with_namespace(ctx: Context, namespace: str) -> Context:
    """Return a context with the namespace set."""
    return ctx.with_value(_ContextKey.NAMESPACE, namespace)


def min_version_from_context(ctx: Context) -> int | None:
    """Return the min version in the context, or None if not set."""
    version = ctx.value(_ContextKey.MIN_VERSION)
    if isinstance(version, int) and not isinstance(version, bool):
        return version
    return None


def with_min_version(ctx: Context, min_version: int) -> Context:
    """Return a context with the min version set."""
    return ctx.with_value(_ContextKey.MIN_VERSION, min_version)


def with_min_version_wait(ctx: Context, min_version: int) -> Context:
    """Return a context with the min version and the default deadline set."""
    return with_min_version(ctx, min_version).with_timeout(DEFAULT_MIN_VERSION_DEADLINE)


ContextMarshalFunc = Callable[[Context, dict], None]
ContextUnmarshalFunc = Callable[[Context, dict], Context]

_marshal_funcs: list[ContextMarshalFunc] = []
_unmarshal_funcs: list[ContextUnmarshalFunc] = []
_lock = threading.RLock()


def context_marshalers() -> list[ContextMarshalFunc]:
    """Return the registered marshaler functions."""
    with _lock:
        return list(_marshal_funcs)


def context_unmarshalers() -> list[ContextUnmarshalFunc]:
    """Return the registered unmarshaler functions."""
    with _lock:
        return list(_unmarshal_funcs)


def register_context_marshaler(func: ContextMarshalFunc) -> None:
    """Register a function that writes context values into a dict."""
    with _lock:
        _marshal_funcs.append(func)


def register_context_unmarshaler(func: ContextUnmarshalFunc) -> None:
    """Register a function that restores context values from a dict."""
    with _lock:
        _unmarshal_funcs.append(func)


def marshal_context(ctx: Context) -> dict[str, Any]:
    """Marshal the context values into a dict, for sending on the wire."""
    all_vals: dict[str, Any] = {}
    for func in context_marshalers():
        vals: dict[str, Any] = {}
        func(ctx, vals)
        for key, val in vals.items():
            if key in all_vals:
                raise ValueError("duplicate context entry for: " + key)
            all_vals[key] = val
    return all_vals


def unmarshal_context(vals: dict[str, Any] | None) -> Context:
    """Build a context from marshaled values."""
    ctx = background()
    if vals is None:
        return ctx
    for func in context_unmarshalers():
        ctx = func(ctx, vals)
    return ctx


def _marshal_namespace(ctx: Context, vals: dict) -> None:
    namespace = ctx.value(_ContextKey.NAMESPACE)
    if isinstance(namespace, str):
        vals[NAMESPACE_KEY_STR] = namespace


def _unmarshal_namespace(ctx: Context, vals: dict) -> Context:
    namespace = vals.get(NAMESPACE_KEY_STR)
    if isinstance(namespace, str):
        return with_namespace(ctx, namespace)
    return ctx


def _marshal_min_version(ctx: Context, vals: dict) -> None:
    version = min_version_from_context(ctx)
    if version is not None:
        vals[MIN_VERSION_KEY_STR] = version


def _unmarshal_min_version(ctx: Context, vals: dict) -> Context:
    version = vals.get(MIN_VERSION_KEY_STR)
    if isinstance(version, bool):
        return ctx
    if isinstance(version, int):
        return with_min_version(ctx, version)
    # JSON-like decoders may hand back numbers as floats.
    if isinstance(version, float):
        return with_min_version(ctx, int(version))
    return ctx


register_context_marshaler(_marshal_namespace)
register_context_unmarshaler(_unmarshal_namespace)
register_context_marshaler(_marshal_min_version)
register_context_unmarshaler(_unmarshal_min_version)