import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from eventhorizon.event import (
    EventDataNotRegisteredError,
    create_event_data,
    new_event,
    new_event_for_aggregate,
    register_event_data,
    unregister_event_data,
)

TEST_EVENT_TYPE = "TestEvent"
TEST_AGGREGATE_TYPE = "TestAggregate"
TIMESTAMP = datetime(2009, 11, 10, 23, 0, 0, tzinfo=timezone.utc)


@dataclass
class _EventData:
    content: str = ""


class _RegisterData:
    pass


def test_new_event():
    event = new_event(TEST_EVENT_TYPE, _EventData("event1"), TIMESTAMP)
    assert event.event_type == TEST_EVENT_TYPE
    assert event.data == _EventData("event1")
    assert event.timestamp == TIMESTAMP
    assert event.version == 0
    assert str(event) == "TestEvent@0"


def test_new_event_for_aggregate():
    id = str(uuid.uuid4())
    event = new_event_for_aggregate(
        TEST_EVENT_TYPE, _EventData("event1"), TIMESTAMP, TEST_AGGREGATE_TYPE, id, 3
    )
    assert event.event_type == TEST_EVENT_TYPE
    assert event.data == _EventData("event1")
    assert event.timestamp == TIMESTAMP
    assert event.aggregate_type == TEST_AGGREGATE_TYPE
    assert event.aggregate_id == id
    assert event.version == 3
    assert str(event) == "TestEvent@3"


def test_create_event_data():
    with pytest.raises(EventDataNotRegisteredError) as info:
        create_event_data("TestEventRegister")
    assert str(info.value) == "event data not registered"

    register_event_data("TestEventRegister", _RegisterData)
    try:
        data = create_event_data("TestEventRegister")
        assert isinstance(data, _RegisterData)
    finally:
        unregister_event_data("TestEventRegister")

    with pytest.raises(EventDataNotRegisteredError):
        create_event_data("TestEventRegister")


def test_register_event_empty_name():
    with pytest.raises(ValueError) as info:
        register_event_data("", _RegisterData)
    assert str(info.value) == "eventhorizon: attempt to register empty event type"


def test_register_event_twice():
    register_event_data("TestEventRegisterTwice", _RegisterData)
    with pytest.raises(ValueError) as info:
        register_event_data("TestEventRegisterTwice", _RegisterData)
    assert str(info.value) == (
        'eventhorizon: registering duplicate types for "TestEventRegisterTwice"'
    )


def test_unregister_event_empty_name():
    with pytest.raises(ValueError) as info:
        unregister_event_data("")
    assert str(info.value) == "eventhorizon: attempt to unregister empty event type"


def test_unregister_event_twice():
    register_event_data("TestEventUnregisterTwice", _RegisterData)
    unregister_event_data("TestEventUnregisterTwice")
    with pytest.raises(ValueError) as info:
        unregister_event_data("TestEventUnregisterTwice")
    assert str(info.value) == (
        'eventhorizon: unregister of non-registered type "TestEventUnregisterTwice"'
    )