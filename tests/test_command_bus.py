import uuid
from dataclasses import dataclass

import pytest

from eventhorizon.command import Command, CommandHandler
from eventhorizon.commandhandlers.command_bus import (
    CommandBus,
    HandlerAlreadySetError,
    HandlerNotFoundError,
)
from eventhorizon.context import background

COMMAND_TYPE = "Command"


@dataclass
class _Command(Command):
    id: str
    content: str

    def aggregate_id(self):
        return self.id

    def aggregate_type(self):
        return "Aggregate"

    def command_type(self):
        return COMMAND_TYPE


class _RecordingHandler(CommandHandler):
    def __init__(self):
        self.commands = []
        self.context = None

    def handle_command(self, ctx, cmd):
        self.commands.append(cmd)
        self.context = ctx


def test_command_handler():
    bus = CommandBus()
    ctx = background().with_value("testkey", "testval")

    cmd = _Command(str(uuid.uuid4()), "command1")
    with pytest.raises(HandlerNotFoundError) as excinfo:
        bus.handle_command(ctx, cmd)
    assert str(excinfo.value) == "no handlers for command"

    handler = _RecordingHandler()
    bus.set_handler(handler, COMMAND_TYPE)

    bus.handle_command(ctx, cmd)
    assert handler.commands == [cmd]
    assert handler.context.value("testkey") == "testval"

    with pytest.raises(HandlerAlreadySetError) as already:
        bus.set_handler(handler, COMMAND_TYPE)
    assert str(already.value) == "handler is already set"


def test_routes_by_command_type():
    bus = CommandBus()
    handler = _RecordingHandler()
    other = _RecordingHandler()
    bus.set_handler(handler, COMMAND_TYPE)
    bus.set_handler(other, "OtherCommand")
    cmd = _Command(str(uuid.uuid4()), "command1")
    bus.handle_command(background(), cmd)
    assert handler.commands == [cmd]
    assert other.commands == []