"""Domain events and the registry of event data factories."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

EventType = str
"""The type of an event, used as its unique identifier."""

EventData = Any
"""Any additional data attached to an event."""


@dataclass(frozen=True)
class Event:
    """A change that has happened to an aggregate."""

    event_type: EventType
    data: EventData
    timestamp: datetime
    aggregate_type: str = ""
    aggregate_id: str = ""
    version: int = 0

    def __str__(self) -> str:
        return f"{self.event_type}@{self.version}"


class EventDataNotRegisteredError(LookupError):
    """Raised when no event data factory is registered for a type."""

    def __init__(self, message: str = "event data not registered") -> None:
        super().__init__(message)


def new_event(event_type: EventType, data: EventData, timestamp: datetime) -> Event:
    """Create an event with a type, data and timestamp."""
    return Event(event_type=event_type, data=data, timestamp=timestamp)


def new_event_for_aggregate(
    event_type: EventType,
    data: EventData,
    timestamp: datetime,
    aggregate_type: str,
    aggregate_id: str,
    version: int,
) -> Event:
    """Create an event that also carries its aggregate's type, ID and version."""
    return Event(
        event_type=event_type,
        data=data,
        timestamp=timestamp,
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        version=version,
    )


_factories: dict[EventType, Callable[[], EventData]] = {}
_factories_lock = threading.Lock()


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def register_event_data(event_type: EventType, factory: Callable[[], EventData]) -> None:
    """Register a factory creating the data object for an event type."""
    if not event_type:
        raise ValueError("eventhorizon: attempt to register empty event type")
    with _factories_lock:
        if event_type in _factories:
            raise ValueError(
                f"eventhorizon: registering duplicate types for {_quote(event_type)}"
            )
        _factories[event_type] = factory


def unregister_event_data(event_type: EventType) -> None:
    """Remove the factory registered for an event type."""
    if not event_type:
        raise ValueError("eventhorizon: attempt to unregister empty event type")
    with _factories_lock:
        if event_type not in _factories:
            raise ValueError(
                f"eventhorizon: unregister of non-registered type {_quote(event_type)}"
            )
        del _factories[event_type]


def create_event_data(event_type: EventType) -> EventData:
    """Create event data for a type using its registered factory."""
    with _factories_lock:
        factory = _factories.get(event_type)
    if factory is None:
        raise EventDataNotRegisteredError()
    return factory()