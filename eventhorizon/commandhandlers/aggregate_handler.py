"""A command handler that dispatches commands to aggregates."""

from __future__ import annotations

from typing import Any

from eventhorizon.aggregate import AggregateNotFoundError, AggregateStore, AggregateType
from eventhorizon.command import Command, CommandHandler, check_command


class NilAggregateStoreError(ValueError):
    """Raised when a handler is created without an aggregate store."""

    def __init__(self, message: str = "aggregate store is nil") -> None:
        super().__init__(message)


class AggregateCommandHandler(CommandHandler):
    """Loads an aggregate, lets it handle a command and saves it again.

    Saving stores the aggregate's new events and publishes them.
    """

    def __init__(
        self, aggregate_type: AggregateType, store: AggregateStore | None
    ) -> None:
        if store is None:
            raise NilAggregateStoreError()
        self._type = aggregate_type
        self._store = store

    def handle_command(self, ctx: Any, cmd: Command) -> None:
        """Handle a command with its aggregate; raises AggregateNotFoundError without one."""
        check_command(cmd)
        aggregate = self._store.load(ctx, self._type, cmd.aggregate_id())
        if aggregate is None:
            raise AggregateNotFoundError()
        aggregate.handle_command(ctx, cmd)
        self._store.save(ctx, aggregate)