"""Optional publishing of events by aggregates after a successful save."""

from __future__ import annotations

from abc import ABC, abstractmethod

from eventhorizon.event import Event


class EventPublisher(ABC):
    """An aggregate that has events to publish once it has been saved."""

    @abstractmethod
    def events_to_publish(self) -> list[Event]:
        """Return all events to publish."""

    @abstractmethod
    def clear_events(self) -> None:
        """Drop all events after they have been published."""


class SliceEventPublisher(EventPublisher):
    """An event publisher keeping its pending events in a list."""

    @property
    def _pending(self) -> list[Event]:
        return self.__dict__.setdefault("_pending_events", [])

    def publish_event(self, event: Event) -> None:
        """Queue an event to be published after the aggregate is saved."""
        self._pending.append(event)

    def events_to_publish(self) -> list[Event]:
        return list(self._pending)

    def clear_events(self) -> None:
        self.__dict__["_pending_events"] = []