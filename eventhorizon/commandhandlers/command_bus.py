"""A command handler routing commands to handlers by command type."""

from __future__ import annotations

import threading
from typing import Any

from eventhorizon.command import Command, CommandHandler, CommandType


class HandlerAlreadySetError(ValueError):
    """Raised when a handler is already set for a command type."""

    def __init__(self, message: str = "handler is already set") -> None:
        super().__init__(message)


class HandlerNotFoundError(LookupError):
    """Raised when no handler is set for a command type."""

    def __init__(self, message: str = "no handlers for command") -> None:
        super().__init__(message)


class CommandBus(CommandHandler):
    """Routes each command to the handler set for its type."""

    def __init__(self) -> None:
        self._handlers: dict[CommandType, CommandHandler] = {}
        self._lock = threading.Lock()

    def handle_command(self, ctx: Any, cmd: Command) -> None:
        """Handle a command with the handler set for its type."""
        with self._lock:
            handler = self._handlers.get(cmd.command_type())
        if handler is None:
            raise HandlerNotFoundError()
        handler.handle_command(ctx, cmd)

    def set_handler(self, handler: CommandHandler, command_type: CommandType) -> None:
        """Set the handler for a command type; raises if one is already set."""
        with self._lock:
            if command_type in self._handlers:
                raise HandlerAlreadySetError()
            self._handlers[command_type] = handler