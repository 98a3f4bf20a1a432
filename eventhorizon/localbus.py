"""An in-process event bus, optionally sharing a publishing group with other buses."""

from __future__ import annotations

import queue
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterator

from eventhorizon.event import Event
from eventhorizon.eventbus import EventBus, EventBusError, EventMatcher
from eventhorizon.eventhandler import EventHandler

DEFAULT_QUEUE_SIZE = 10
"""Number of events queued per handler before further events are dropped."""

_ERROR_QUEUE_SIZE = 100


@dataclass(frozen=True)
class _Envelope:
    ctx: Any
    event: Event


class _Channel:
    """A bounded queue that can be closed; readers drain it before stopping."""

    def __init__(self, capacity: int) -> None:
        self._items: deque[_Envelope] = deque()
        self._capacity = capacity
        self._closed = False
        self._cond = threading.Condition()

    def offer(self, item: _Envelope) -> bool:
        """Queue an item unless the channel is full or closed."""
        with self._cond:
            if self._closed or len(self._items) >= self._capacity:
                return False
            self._items.append(item)
            self._cond.notify()
            return True

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[_Envelope]:
        while True:
            with self._cond:
                while not self._items and not self._closed:
                    self._cond.wait()
                if not self._items:
                    return
                item = self._items.popleft()
            yield item


class Group:
    """A publishing group shared by local event buses.

    Handlers of the same type on buses in one group share a queue, so only
    one of them receives each event.
    """

    def __init__(self) -> None:
        self._channels: dict[str, _Channel] = {}
        self._lock = threading.Lock()

    def _channel(self, id: str) -> _Channel:
        with self._lock:
            channel = self._channels.get(id)
            if channel is None:
                channel = _Channel(DEFAULT_QUEUE_SIZE)
                self._channels[id] = channel
            return channel

    def _publish(self, ctx: Any, event: Event) -> None:
        with self._lock:
            channels = list(self._channels.values())
        envelope = _Envelope(ctx, event)
        for channel in channels:
            # A full queue drops the event for that handler.
            channel.offer(envelope)

    def close(self) -> None:
        """Close all queues of the group; handlers stop once drained."""
        with self._lock:
            channels = list(self._channels.values())
            self._channels = {}
        for channel in channels:
            channel.close()


class LocalEventBus(EventBus):
    """An event bus delivering events to handlers on background threads."""

    def __init__(self, group: Group | None = None) -> None:
        self._group = group if group is not None else Group()
        self._registered: set[str] = set()
        self._lock = threading.Lock()
        self._errors: queue.Queue[EventBusError] = queue.Queue(maxsize=_ERROR_QUEUE_SIZE)
        self._threads: list[threading.Thread] = []

    def publish_event(self, ctx: Any, event: Event) -> None:
        """Publish an event to every queue in the group."""
        self._group._publish(ctx, event)

    def add_handler(self, matcher: EventMatcher, handler: EventHandler) -> None:
        """Add a handler; one handler of each type in the group gets each event."""
        channel = self._channel(matcher, handler, observer=False)
        self._start(matcher, handler, channel)

    def add_observer(self, matcher: EventMatcher, handler: EventHandler) -> None:
        """Add an observer; every observer gets each event."""
        channel = self._channel(matcher, handler, observer=True)
        self._start(matcher, handler, channel)

    def errors(self) -> "queue.Queue[EventBusError]":
        """Return the queue of asynchronous handling errors."""
        return self._errors

    def close(self) -> None:
        """Close all queues of the bus's group."""
        self._group.close()

    def wait(self) -> None:
        """Wait for all handler threads of this bus to finish."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join()

    def _channel(
        self, matcher: EventMatcher, handler: EventHandler, observer: bool
    ) -> _Channel:
        with self._lock:
            if matcher is None:
                raise ValueError("matcher can't be nil")
            if handler is None:
                raise ValueError("handler can't be nil")
            handler_type = handler.handler_type()
            if handler_type in self._registered:
                raise ValueError(f"multiple registrations for {handler_type}")
            self._registered.add(handler_type)
        id = handler_type
        if observer:
            id = f"{id}-{uuid.uuid4()}"
        return self._group._channel(id)

    def _start(
        self, matcher: EventMatcher, handler: EventHandler, channel: _Channel
    ) -> None:
        thread = threading.Thread(
            target=self._handle,
            args=(matcher, handler, channel),
            name=f"eventbus-{handler.handler_type()}",
            daemon=True,
        )
        with self._lock:
            self._threads.append(thread)
        thread.start()

    def _handle(
        self, matcher: EventMatcher, handler: EventHandler, channel: _Channel
    ) -> None:
        for envelope in channel:
            if not matcher(envelope.event):
                continue
            try:
                handler.handle_event(envelope.ctx, envelope.event)
            except Exception as err:
                bus_error = EventBusError(
                    RuntimeError(
                        f"could not handle event ({handler.handler_type()}): {err}"
                    ),
                    envelope.ctx,
                    envelope.event,
                )
                try:
                    self._errors.put_nowait(bus_error)
                except queue.Full:
                    pass