"""Entities: items identified by an ID."""

from __future__ import annotations

from abc import ABC, abstractmethod

ID = str
"""Identifier of an entity; any string, for example a UUID."""

NIL_ID: ID = ""
"""The empty identifier."""

_ZERO_UUID = "00000000-0000-0000-0000-000000000000"


class Entity(ABC):
    """An item identified by an ID rather than by its attribute values."""

    @abstractmethod
    def entity_id(self) -> ID:
        """Return the ID of the entity."""


def is_nil_id(id: ID) -> bool:
    """Return True if the ID is empty or the all-zero UUID."""
    return id in (NIL_ID, _ZERO_UUID)