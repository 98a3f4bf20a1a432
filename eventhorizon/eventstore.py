"""The event store interfaces and their errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from eventhorizon.event import Event, EventType


class EventStoreError(Exception):
    """An error in the event store, with the namespace it happened in."""

    def __init__(
        self,
        err: BaseException,
        base_err: BaseException | None = None,
        namespace: str = "",
    ) -> None:
        super().__init__(err, base_err, namespace)
        self.err = err
        self.base_err = base_err
        self.namespace = namespace

    def __str__(self) -> str:
        text = str(self.err)
        if self.base_err is not None:
            text += ": " + str(self.base_err)
        return f"{text} ({self.namespace})"


class NoEventsToAppendError(Exception):
    """Raised when there are no events to append."""

    def __init__(self, message: str = "no events to append") -> None:
        super().__init__(message)


class InvalidEventError(Exception):
    """Raised when an event is not a valid event."""

    def __init__(self, message: str = "invalid event") -> None:
        super().__init__(message)


class IncorrectEventVersionError(Exception):
    """Raised when an event is for another version of the aggregate."""

    def __init__(self, message: str = "mismatching event version") -> None:
        super().__init__(message)


class EventStore(ABC):
    """A store of event streams for event sourcing."""

    @abstractmethod
    def save(self, ctx: Any, events: Sequence[Event], original_version: int) -> None:
        """Append all events in the stream to the store."""

    @abstractmethod
    def load(self, ctx: Any, id: str) -> list[Event]:
        """Load all events for the aggregate ID."""


class EventStoreMaintainer(EventStore):
    """Maintenance operations on an event store, for migration tools."""

    @abstractmethod
    def replace(self, ctx: Any, event: Event) -> None:
        """Replace an event of the same version; raises if there is no aggregate."""

    @abstractmethod
    def rename_event(self, ctx: Any, from_type: EventType, to_type: EventType) -> None:
        """Rename all instances of an event type."""