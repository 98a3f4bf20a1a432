import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from eventhorizon.command import Command, CommandHandler
from eventhorizon.context import background
from eventhorizon.event import new_event_for_aggregate
from eventhorizon.handlers.saga import Saga, SagaCommandError, SagaHandler

TIMESTAMP = datetime(2009, 11, 10, 23, 0, 0, tzinfo=timezone.utc)


@dataclass
class MockCommand(Command):
    id: str
    content: str

    def aggregate_id(self):
        return self.id

    def aggregate_type(self):
        return "Aggregate"

    def command_type(self):
        return "Command"


class RecordingCommandHandler(CommandHandler):
    def __init__(self, err=None):
        self.commands = []
        self.err = err

    def handle_command(self, ctx, cmd):
        if self.err is not None:
            raise self.err
        self.commands.append(cmd)


class RecordingSaga(Saga):
    def __init__(self):
        self.event = None
        self.ctx = None
        self.commands = []

    def saga_type(self):
        return "TestSaga"

    def run_saga(self, ctx, event):
        self.event = event
        self.ctx = ctx
        return self.commands


def make_event():
    return new_event_for_aggregate(
        "Event", {"content": "event1"}, TIMESTAMP, "Aggregate", str(uuid.uuid4()), 1
    )


def test_event_handler():
    command_handler = RecordingCommandHandler()
    saga = RecordingSaga()
    handler = SagaHandler(saga, command_handler)
    event = make_event()
    saga.commands = [MockCommand(str(uuid.uuid4()), "content")]
    ctx = background().with_value("key", "val")
    handler.handle_event(ctx, event)
    assert saga.event == event
    assert saga.ctx.value("key") == "val"
    assert command_handler.commands == saga.commands


def test_handler_type():
    handler = SagaHandler(RecordingSaga(), RecordingCommandHandler())
    assert handler.handler_type() == "saga_TestSaga"


def test_command_error():
    command_handler = RecordingCommandHandler(err=RuntimeError("boom"))
    saga = RecordingSaga()
    saga.commands = [MockCommand(str(uuid.uuid4()), "content")]
    handler = SagaHandler(saga, command_handler)
    with pytest.raises(SagaCommandError) as excinfo:
        handler.handle_event(background(), make_event())
    assert str(excinfo.value) == (
        "could not handle command 'Command' from saga 'TestSaga': boom"
    )
    assert excinfo.value.command_type == "Command"


def test_no_commands_dispatches_nothing():
    command_handler = RecordingCommandHandler()
    saga = RecordingSaga()
    handler = SagaHandler(saga, command_handler)
    event = make_event()
    handler.handle_event(background(), event)
    assert saga.event == event
    assert command_handler.commands == []