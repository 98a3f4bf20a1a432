"""Event handlers and handler middleware."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from eventhorizon.event import Event

EventHandlerType = str
"""The type of an event handler, used as its unique identifier."""


class EventHandler(ABC):
    """A handler of events.

    Registered on a bus as a handler, only one handler of the same type gets
    each event; registered as an observer, all of them do.
    """

    @abstractmethod
    def handler_type(self) -> EventHandlerType:
        """Return the type of the handler."""

    @abstractmethod
    def handle_event(self, ctx: Any, event: Event) -> None:
        """Handle an event, raising on failure."""


class EventHandlerFunc(EventHandler):
    """An event handler made from a plain function."""

    def __init__(self, func: Callable[[Any, Event], None]) -> None:
        self._func = func

    def handler_type(self) -> EventHandlerType:
        # The function's identity keeps distinct functions apart.
        return f"handler-func-{id(self._func):#x}"

    def handle_event(self, ctx: Any, event: Event) -> None:
        self._func(ctx, event)

    def __call__(self, ctx: Any, event: Event) -> None:
        self._func(ctx, event)


EventHandlerMiddleware = Callable[[EventHandler], EventHandler]


def use_event_handler_middleware(
    handler: EventHandler, *args: EventHandlerMiddleware
) -> EventHandler:
    """Wrap a handler in middleware; the first middleware runs first."""
    for middleware in reversed(args):
        handler = middleware(handler)
    return handler