"""An event handler that lets callers wait for events matching a condition."""

from __future__ import annotations

import threading
import uuid
from collections import deque
from typing import Any, Callable

from eventhorizon.context import Context
from eventhorizon.event import Event
from eventhorizon.eventhandler import EventHandler, EventHandlerType

EventMatch = Callable[[Event], bool]

_POLL_INTERVAL = 0.05


class EventListener:
    """Receives matching events from a Waiter; holds at most one pending event."""

    def __init__(self, waiter: "Waiter", match: EventMatch | None) -> None:
        self.id = str(uuid.uuid4())
        self._waiter = waiter
        self._match = match
        self._inbox: deque[Event] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def _offer(self, event: Event) -> None:
        if self._match is not None and not self._match(event):
            return
        with self._cond:
            # Events beyond the single-slot buffer are dropped.
            if self._closed or self._inbox:
                return
            self._inbox.append(event)
            self._cond.notify_all()

    def _shut(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def wait(self, ctx: Context) -> Event | None:
        """Wait for a matching event; raises if the context ends first.

        Returns None once the listener has been closed and has no event left.
        """
        with self._cond:
            while True:
                if self._inbox:
                    return self._inbox.popleft()
                if self._closed:
                    return None
                ctx.check()
                remaining = ctx.remaining()
                timeout = _POLL_INTERVAL if remaining is None else min(remaining, _POLL_INTERVAL)
                self._cond.wait(timeout)

    def close(self) -> None:
        """Stop listening for more events."""
        self._waiter._unregister(self)

    def __enter__(self) -> "EventListener":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Waiter(EventHandler):
    """Forwards handled events to the listeners waiting for them."""

    def __init__(self) -> None:
        self._listeners: dict[str, EventListener] = {}
        self._lock = threading.Lock()

    def handler_type(self) -> EventHandlerType:
        return "waiter"

    def handle_event(self, ctx: Any, event: Event) -> None:
        """Offer the event to every listener whose match accepts it."""
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener._offer(event)

    def listen(self, match: EventMatch | None) -> EventListener:
        """Start listening for events for which match returns True; None matches all."""
        listener = EventListener(self, match)
        with self._lock:
            self._listeners[listener.id] = listener
        return listener

    def _unregister(self, listener: EventListener) -> None:
        with self._lock:
            removed = self._listeners.pop(listener.id, None)
        if removed is not None:
            removed._shut()