"""Aggregates, aggregate stores and the registry of aggregate factories."""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

from eventhorizon.command import CommandHandler
from eventhorizon.entity import ID, NIL_ID, Entity

AggregateType = str
"""The type of an aggregate."""


class AggregateNotFoundError(LookupError):
    """Raised when no aggregate can be found."""

    def __init__(self, message: str = "aggregate not found") -> None:
        super().__init__(message)


class AggregateNotRegisteredError(LookupError):
    """Raised when no aggregate factory is registered for a type."""

    def __init__(self, message: str = "aggregate not registered") -> None:
        super().__init__(message)


class Aggregate(Entity, CommandHandler):
    """A versioned entity built from events, receiving commands."""

    @abstractmethod
    def entity_id(self) -> ID:
        """Return the ID of the aggregate."""

    @abstractmethod
    def aggregate_type(self) -> AggregateType:
        """Return the type name of the aggregate."""

    @abstractmethod
    def handle_command(self, ctx: Any, cmd: Any) -> None:
        """Handle a command, raising on failure."""


class AggregateStore(ABC):
    """Loads and saves aggregates."""

    @abstractmethod
    def load(self, ctx: Any, aggregate_type: AggregateType, id: ID) -> Aggregate:
        """Load the most recent version of an aggregate."""

    @abstractmethod
    def save(self, ctx: Any, aggregate: Aggregate) -> None:
        """Save the uncommitted events of an aggregate."""


_factories: dict[AggregateType, Callable[[ID], Aggregate]] = {}
_factories_lock = threading.Lock()


def register_aggregate(factory: Callable[[ID], Aggregate]) -> None:
    """Register a factory creating aggregates of the type it produces."""
    aggregate = factory(NIL_ID)
    if aggregate is None:
        raise ValueError("eventhorizon: created aggregate is nil")
    aggregate_type = aggregate.aggregate_type()
    if not aggregate_type:
        raise ValueError("eventhorizon: attempt to register empty aggregate type")
    with _factories_lock:
        if aggregate_type in _factories:
            raise ValueError(
                "eventhorizon: registering duplicate types for "
                + json.dumps(aggregate_type, ensure_ascii=False)
            )
        _factories[aggregate_type] = factory


def create_aggregate(aggregate_type: AggregateType, id: ID) -> Aggregate:
    """Create an aggregate of a type with an ID using its registered factory."""
    with _factories_lock:
        factory = _factories.get(aggregate_type)
    if factory is None:
        raise AggregateNotRegisteredError()
    return factory(id)