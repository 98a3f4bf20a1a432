import uuid
from dataclasses import dataclass

import pytest

from eventhorizon.aggregate import Aggregate, AggregateNotFoundError, AggregateStore
from eventhorizon.command import Command, CommandFieldError
from eventhorizon.commandhandlers.aggregate_handler import (
    AggregateCommandHandler,
    NilAggregateStoreError,
)
from eventhorizon.context import background

AGGREGATE_TYPE = "Aggregate"


@dataclass
class _Command(Command):
    id: str
    content: str

    def aggregate_id(self):
        return self.id

    def aggregate_type(self):
        return AGGREGATE_TYPE

    def command_type(self):
        return "Command"


class _Aggregate(Aggregate):
    def __init__(self, id):
        self.id = id
        self.commands = []
        self.context = None
        self.err = None

    def entity_id(self):
        return self.id

    def aggregate_type(self):
        return AGGREGATE_TYPE

    def handle_command(self, ctx, cmd):
        if self.err is not None:
            raise self.err
        self.commands.append(cmd)
        self.context = ctx


class _Store(AggregateStore):
    def __init__(self, aggregates):
        self.aggregates = aggregates
        self.saved = []
        self.err = None

    def load(self, ctx, aggregate_type, id):
        return self.aggregates.get(id)

    def save(self, ctx, aggregate):
        if self.err is not None:
            raise self.err
        self.saved.append(aggregate)


def _create():
    agg = _Aggregate(str(uuid.uuid4()))
    store = _Store({agg.entity_id(): agg})
    return agg, AggregateCommandHandler(AGGREGATE_TYPE, store), store


def test_new_command_handler():
    handler = AggregateCommandHandler(AGGREGATE_TYPE, _Store({}))
    assert isinstance(handler, AggregateCommandHandler)
    with pytest.raises(NilAggregateStoreError) as excinfo:
        AggregateCommandHandler(AGGREGATE_TYPE, None)
    assert str(excinfo.value) == "aggregate store is nil"


def test_command_handler():
    agg, handler, store = _create()
    ctx = background().with_value("testkey", "testval")
    cmd = _Command(agg.entity_id(), "command1")
    handler.handle_command(ctx, cmd)
    assert agg.commands == [cmd]
    assert agg.context.value("testkey") == "testval"
    assert store.saved == [agg]


def test_command_handler_aggregate_not_found():
    handler = AggregateCommandHandler(AGGREGATE_TYPE, _Store({}))
    cmd = _Command(str(uuid.uuid4()), "command1")
    with pytest.raises(AggregateNotFoundError):
        handler.handle_command(background(), cmd)


def test_command_handler_error_in_handler():
    agg, handler, store = _create()
    agg.err = RuntimeError("command error")
    cmd = _Command(agg.entity_id(), "command1")
    with pytest.raises(RuntimeError) as excinfo:
        handler.handle_command(background(), cmd)
    assert str(excinfo.value) == "command error"
    assert agg.commands == []
    assert store.saved == []


def test_command_handler_error_when_saving():
    agg, handler, store = _create()
    store.err = RuntimeError("save error")
    cmd = _Command(agg.entity_id(), "command1")
    with pytest.raises(RuntimeError) as excinfo:
        handler.handle_command(background(), cmd)
    assert str(excinfo.value) == "save error"


def test_command_handler_no_handlers():
    _, handler, _ = _create()
    cmd = _Command(str(uuid.uuid4()), "command1")
    with pytest.raises(AggregateNotFoundError):
        handler.handle_command(background(), cmd)


def test_command_handler_checks_command():
    agg, handler, _ = _create()
    cmd = _Command(agg.entity_id(), "")
    with pytest.raises(CommandFieldError) as excinfo:
        handler.handle_command(background(), cmd)
    assert excinfo.value.field == "content"
    assert agg.commands == []