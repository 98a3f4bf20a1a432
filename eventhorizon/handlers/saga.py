"""Sagas: long-lived transactions reacting to events with commands."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from eventhorizon.command import Command, CommandHandler
from eventhorizon.event import Event
from eventhorizon.eventhandler import EventHandler, EventHandlerType

SagaType = str
"""The type of a saga, used as its unique identifier."""


class SagaCommandError(Exception):
    """Raised when a command produced by a saga could not be handled."""

    def __init__(self, command_type: str, saga_type: SagaType, err: BaseException) -> None:
        super().__init__(
            f"could not handle command '{command_type}' from saga '{saga_type}': {err}"
        )
        self.command_type = command_type
        self.saga_type = saga_type
        self.err = err


class Saga(ABC):
    """Listens to events and produces commands."""

    @abstractmethod
    def saga_type(self) -> SagaType:
        """Return the type of the saga."""

    @abstractmethod
    def run_saga(self, ctx: Any, event: Event) -> list[Command]:
        """Handle an event, returning the commands to dispatch."""


class SagaHandler(EventHandler):
    """An event handler running a saga and dispatching its commands."""

    def __init__(self, saga: Saga, command_handler: CommandHandler) -> None:
        self._saga = saga
        self._command_handler = command_handler

    def handler_type(self) -> EventHandlerType:
        return "saga_" + self._saga.saga_type()

    def handle_event(self, ctx: Any, event: Event) -> None:
        """Run the saga and hand each command it returns to the command handler."""
        for cmd in self._saga.run_saga(ctx, event) or ():
            try:
                self._command_handler.handle_command(ctx, cmd)
            except Exception as err:
                raise SagaCommandError(
                    cmd.command_type(), self._saga.saga_type(), err
                ) from err