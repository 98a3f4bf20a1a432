"""Commands, command handlers and the registry of command factories."""

from __future__ import annotations

import dataclasses
import functools
import json
import threading
import types
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Iterator

from eventhorizon.entity import ID

CommandType = str
"""The type of a command, used as its unique identifier."""


class Command(ABC):
    """A domain command sent to a handler.

    Commands are usually dataclasses holding all the data needed to handle
    them. A field declared with ``metadata={"eh": "optional"}`` may be left
    empty; fields whose names start with an underscore are not checked.
    """

    @abstractmethod
    def aggregate_id(self) -> ID:
        """Return the ID of the aggregate that should handle the command."""

    @abstractmethod
    def aggregate_type(self) -> str:
        """Return the type of the aggregate that can handle the command."""

    @abstractmethod
    def command_type(self) -> CommandType:
        """Return the type of the command."""


class CommandNotRegisteredError(LookupError):
    """Raised when no command factory is registered for a type."""

    def __init__(self, message: str = "command not registered") -> None:
        super().__init__(message)


class CommandFieldError(ValueError):
    """Raised when a required field of a command is missing."""

    def __init__(self, field: str) -> None:
        super().__init__("missing field: " + field)
        self.field = field


class CommandHandler(ABC):
    """A handler of commands."""

    @abstractmethod
    def handle_command(self, ctx: Any, cmd: Command) -> None:
        """Handle a command, raising on failure."""


class CommandHandlerFunc(CommandHandler):
    """A command handler made from a plain function."""

    def __init__(self, func: Callable[[Any, Command], None]) -> None:
        self._func = func

    def handle_command(self, ctx: Any, cmd: Command) -> None:
        self._func(ctx, cmd)

    def __call__(self, ctx: Any, cmd: Command) -> None:
        self._func(ctx, cmd)


CommandHandlerMiddleware = Callable[[CommandHandler], CommandHandler]


def use_command_handler_middleware(
    handler: CommandHandler, *args: CommandHandlerMiddleware
) -> CommandHandler:
    """Wrap a handler in middleware; the first middleware runs first."""
    for middleware in reversed(args):
        handler = middleware(handler)
    return handler


_factories: dict[CommandType, Callable[[], Command]] = {}
_factories_lock = threading.Lock()


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def register_command(factory: Callable[[], Command]) -> None:
    """Register a factory creating commands of the type it produces."""
    cmd = factory()
    if cmd is None:
        raise ValueError("eventhorizon: created command is nil")
    command_type = cmd.command_type()
    if not command_type:
        raise ValueError("eventhorizon: attempt to register empty command type")
    with _factories_lock:
        if command_type in _factories:
            raise ValueError(
                f"eventhorizon: registering duplicate types for {_quote(command_type)}"
            )
        _factories[command_type] = factory


def unregister_command(command_type: CommandType) -> None:
    """Remove the factory registered for a command type."""
    if not command_type:
        raise ValueError("eventhorizon: attempt to unregister empty command type")
    with _factories_lock:
        if command_type not in _factories:
            raise ValueError(
                f"eventhorizon: unregister of non-registered type {_quote(command_type)}"
            )
        del _factories[command_type]


def create_command(command_type: CommandType) -> Command:
    """Create a command of a type using its registered factory."""
    with _factories_lock:
        factory = _factories.get(command_type)
    if factory is None:
        raise CommandNotRegisteredError()
    return factory()


def _public_fields(obj: Any) -> Iterator[tuple[str, Any, Any]]:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        for field in dataclasses.fields(obj):
            if not field.name.startswith("_"):
                yield field.name, getattr(obj, field.name), field.metadata
    else:
        for name, value in vars(obj).items():
            if not name.startswith("_"):
                yield name, value, {}


_CALLABLES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.LambdaType,
    functools.partial,
)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, _CALLABLES):
        # Functions are not allowed as command data.
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, tuple):
        return all(_is_zero(item) for item in value)
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(_is_zero(item) for _, item, _ in _public_fields(value))
    # Numbers, booleans and present collections always count as set.
    return False


def check_command(cmd: Command) -> None:
    """Raise CommandFieldError for the first required field left empty."""
    for name, value, metadata in _public_fields(cmd):
        if metadata.get("eh") == "optional":
            continue
        if _is_zero(value):
            raise CommandFieldError(name)