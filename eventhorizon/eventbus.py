"""The event bus interface and its asynchronous error type."""

from __future__ import annotations

import queue
from abc import ABC, abstractmethod
from typing import Any, Callable

from eventhorizon.event import Event
from eventhorizon.eventhandler import EventHandler

EventMatcher = Callable[[Event], bool]

_NIL = "%!s(<nil>)"


class EventBusError(Exception):
    """An error from a handler or observer, with the event it happened on."""

    def __init__(
        self,
        err: BaseException | None = None,
        ctx: Any = None,
        event: Event | None = None,
    ) -> None:
        super().__init__(err, event)
        self.err = err
        self.ctx = ctx
        self.event = event

    def __str__(self) -> str:
        err = _NIL if self.err is None else str(self.err)
        event = _NIL if self.event is None else str(self.event)
        return f"{err}: ({event})"


class EventBus(ABC):
    """Sends published events to one handler of each type and to all observers.

    Events are not guaranteed to be handled or observed in order.
    """

    @abstractmethod
    def publish_event(self, ctx: Any, event: Event) -> None:
        """Publish an event on the bus."""

    @abstractmethod
    def add_handler(self, matcher: EventMatcher, handler: EventHandler) -> None:
        """Add a handler; raises if either is None or the handler is already added."""

    @abstractmethod
    def add_observer(self, matcher: EventMatcher, handler: EventHandler) -> None:
        """Add an observer; raises if either is None or it is already added."""

    @abstractmethod
    def errors(self) -> "queue.Queue[EventBusError]":
        """Return the queue on which asynchronous handling errors are put."""