"""Event sourced aggregates and the aggregate store that rebuilds them from events."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Iterable

from eventhorizon import aggregate as _aggregate
from eventhorizon.aggregate import Aggregate, AggregateType, create_aggregate
from eventhorizon.entity import ID
from eventhorizon.event import Event, EventData, EventType, new_event_for_aggregate
from eventhorizon.eventbus import EventBus
from eventhorizon.eventstore import EventStore


class InvalidEventStoreError(ValueError):
    """Raised when an aggregate store is created without an event store."""

    def __init__(self, message: str = "invalid event store") -> None:
        super().__init__(message)


class InvalidEventBusError(ValueError):
    """Raised when an aggregate store is created without an event bus."""

    def __init__(self, message: str = "invalid event bus") -> None:
        super().__init__(message)


class InvalidAggregateTypeError(TypeError):
    """Raised when an aggregate is not an event sourced aggregate."""

    def __init__(self, message: str = "invalid aggregate type") -> None:
        super().__init__(message)


class MismatchedEventTypeError(ValueError):
    """Raised when loaded events belong to another type of aggregate."""

    def __init__(
        self, message: str = "mismatched event type and aggregate type"
    ) -> None:
        super().__init__(message)


class ApplyEventError(Exception):
    """Raised when an event could not be applied to an aggregate."""

    def __init__(self, event: Event, err: BaseException) -> None:
        super().__init__(event, err)
        self.event = event
        self.err = err

    def __str__(self) -> str:
        return f"failed to apply event {self.event}: {self.err}"


class AggregateBase:
    """Common state of an event sourced aggregate: ID, type, version and new events."""

    def __init__(self, aggregate_type: AggregateType, id: ID) -> None:
        self._id = id
        self._type = aggregate_type
        self._version = 0
        self._events: list[Event] = []

    def entity_id(self) -> ID:
        """Return the ID of the aggregate."""
        return self._id

    def aggregate_type(self) -> AggregateType:
        """Return the type of the aggregate."""
        return self._type

    def version(self) -> int:
        """Return the version of the aggregate."""
        return self._version

    def increment_version(self) -> None:
        """Increment the version; called after an event has been applied."""
        self._version += 1

    def events(self) -> list[Event]:
        """Return the uncommitted events."""
        return list(self._events)

    def clear_events(self) -> None:
        """Drop all uncommitted events."""
        self._events = []

    def store_event(
        self, event_type: EventType, data: EventData, timestamp: datetime
    ) -> Event:
        """Create and keep an uncommitted event for this aggregate."""
        event = new_event_for_aggregate(
            event_type,
            data,
            timestamp,
            self.aggregate_type(),
            self.entity_id(),
            self.version() + len(self._events) + 1,
        )
        self._events.append(event)
        return event


class EventSourcedAggregate(AggregateBase, Aggregate):
    """An aggregate whose state is built by applying its events."""

    @abstractmethod
    def apply_event(self, ctx: Any, event: Event) -> None:
        """Apply an event to the aggregate's state, raising if it cannot."""


class AggregateStore(_aggregate.AggregateStore):
    """Loads aggregates by replaying their events and saves their new events."""

    def __init__(self, store: EventStore | None, bus: EventBus | None) -> None:
        if store is None:
            raise InvalidEventStoreError()
        if bus is None:
            raise InvalidEventBusError()
        self._store = store
        self._bus = bus

    def load(self, ctx: Any, aggregate_type: AggregateType, id: ID) -> Aggregate:
        """Create an aggregate and apply all its stored events to it."""
        agg = create_aggregate(aggregate_type, id)
        if not isinstance(agg, EventSourcedAggregate):
            raise InvalidAggregateTypeError()
        events = self._store.load(ctx, agg.entity_id())
        self._apply_events(ctx, agg, events)
        return agg

    def save(self, ctx: Any, aggregate: Aggregate) -> None:
        """Store the uncommitted events, apply them and publish them on the bus."""
        if not isinstance(aggregate, EventSourcedAggregate):
            raise InvalidAggregateTypeError()
        events = aggregate.events()
        if not events:
            return
        self._store.save(ctx, events, aggregate.version())
        aggregate.clear_events()
        self._apply_events(ctx, aggregate, events)
        for event in events:
            self._bus.publish_event(ctx, event)

    @staticmethod
    def _apply_events(
        ctx: Any, aggregate: EventSourcedAggregate, events: Iterable[Event]
    ) -> None:
        for event in events:
            if event.aggregate_type != aggregate.aggregate_type():
                raise MismatchedEventTypeError()
            try:
                aggregate.apply_event(ctx, event)
            except Exception as err:
                raise ApplyEventError(event, err) from err
            aggregate.increment_version()