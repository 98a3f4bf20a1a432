# eventhorizon

A toolkit for building applications with CQRS and event sourcing. It has
no dependencies outside the standard library.

## What is in it

- `eventhorizon.entity`: the `Entity` base class and `is_nil_id`, which
  treats both `""` and the all-zero UUID as empty.
- `eventhorizon.event`: the frozen `Event` dataclass (`str(event)` gives
  `"<type>@<version>"`), `new_event`, `new_event_for_aggregate` and a
  registry of event data factories: `register_event_data`,
  `unregister_event_data`, `create_event_data` (raises
  `EventDataNotRegisteredError`).
- `eventhorizon.command`: the `Command` base class, a command registry
  (`register_command`, `unregister_command`, `create_command`, raising
  `CommandNotRegisteredError`), `check_command`, and `CommandHandler`,
  `CommandHandlerFunc` and `use_command_handler_middleware`.
- `eventhorizon.aggregate`: the `Aggregate` and `AggregateStore`
  interfaces, `register_aggregate` and `create_aggregate` (raises
  `AggregateNotRegisteredError`).
- `eventhorizon.context`: a small immutable `Context` carrying values,
  cancellation and deadlines (`background()`, `with_value`,
  `with_timeout`, `with_cancel`, `cancel`, `check`, `done`,
  `remaining`; usable as a context manager that cancels on exit), the
  namespace and min version helpers (`with_namespace`,
  `namespace_from_context`, `with_min_version`,
  `min_version_from_context`, `with_min_version_wait`), and
  `marshal_context` / `unmarshal_context` with pluggable
  `register_context_marshaler` / `register_context_unmarshaler`.
- `eventhorizon.eventhandler`: `EventHandler`, `EventHandlerFunc` and
  `use_event_handler_middleware`.
- `eventhorizon.eventbus`: the `EventBus` interface and `EventBusError`.
- `eventhorizon.eventstore`: the `EventStore` and `EventStoreMaintainer`
  interfaces and their error types.
- `eventhorizon.aggregatestore.eventsourced`: `AggregateBase`,
  `EventSourcedAggregate` and an `AggregateStore` that rebuilds aggregates
  by replaying their events from an event store, and on save stores the
  new events, applies them and publishes them on an event bus.
- `eventhorizon.aggregatestore.publisher`: `EventPublisher` and
  `SliceEventPublisher`, a mixin that keeps a list of events to publish.
- `eventhorizon.commandhandlers.aggregate_handler`:
  `AggregateCommandHandler`, which checks a command, loads its aggregate,
  lets it handle the command and saves it.
- `eventhorizon.commandhandlers.command_bus`: `CommandBus`, which routes
  commands to the handler set for their type.
- `eventhorizon.localbus`: `LocalEventBus` and `Group`, an in-process bus
  that runs each handler and observer on its own thread. Handlers of the
  same type on buses sharing a `Group` share one queue, so only one of
  them gets each event; every observer gets every event. Each queue holds
  10 events; further events are dropped for that handler. Handler
  failures are put on the `errors()` queue as `EventBusError`.
- `eventhorizon.handlers.saga`: `Saga` and `SagaHandler`, which runs a
  saga on each event and dispatches the commands it returns.
- `eventhorizon.handlers.waiter`: `Waiter`, an event handler that lets
  callers `listen` for events matching a condition and `wait` for them
  under a context.

Failures are raised as exceptions. Misuse of the registries (empty type,
duplicate registration, unregistering an unknown type) raises
`ValueError`.

### Command checks

`check_command` raises `CommandFieldError("missing field: <name>")` for
the first public field of a command left empty: `None`, `""`, a tuple
whose items are all empty, `datetime.min`, a dataclass whose public
fields are all empty, or a function. Numbers and booleans always count as
set. Fields whose names start with `_` are skipped, as are dataclass
fields declared with `field(metadata={"eh": "optional"})`.

## Installation

```
pip install .
```

## Example

```python
from dataclasses import dataclass
from datetime import datetime, timezone

from eventhorizon.aggregate import register_aggregate
from eventhorizon.aggregatestore.eventsourced import (
    AggregateStore,
    EventSourcedAggregate,
)
from eventhorizon.command import Command
from eventhorizon.commandhandlers.aggregate_handler import AggregateCommandHandler
from eventhorizon.commandhandlers.command_bus import CommandBus
from eventhorizon.context import background
from eventhorizon.eventhandler import EventHandlerFunc
from eventhorizon.eventstore import EventStore
from eventhorizon.localbus import LocalEventBus


class MemoryEventStore(EventStore):
    def __init__(self):
        self._streams = {}

    def save(self, ctx, events, original_version):
        for event in events:
            self._streams.setdefault(event.aggregate_id, []).append(event)

    def load(self, ctx, id):
        return list(self._streams.get(id, []))


@dataclass
class CreateUser(Command):
    id: str
    name: str

    def aggregate_id(self):
        return self.id

    def aggregate_type(self):
        return "User"

    def command_type(self):
        return "CreateUser"


class User(EventSourcedAggregate):
    def __init__(self, id):
        super().__init__("User", id)
        self.name = ""

    def handle_command(self, ctx, cmd):
        self.store_event("UserCreated", {"name": cmd.name},
                         datetime.now(timezone.utc))

    def apply_event(self, ctx, event):
        self.name = event.data["name"]


register_aggregate(User)

bus = LocalEventBus()
bus.add_observer(lambda event: True,
                 EventHandlerFunc(lambda ctx, event: print("saw", event)))

store = AggregateStore(MemoryEventStore(), bus)
commands = CommandBus()
commands.set_handler(AggregateCommandHandler("User", store), "CreateUser")
commands.handle_command(background(), CreateUser("user-1", "Ada"))

bus.close()
bus.wait()   # prints "saw UserCreated@1"
```

Waiting for an event:

```python
from eventhorizon.handlers.waiter import Waiter

waiter = Waiter()
bus.add_handler(lambda event: True, waiter)
with waiter.listen(lambda event: event.event_type == "UserCreated") as listener:
    with background().with_timeout(1.0) as ctx:
        event = listener.wait(ctx)   # raises DeadlineExceeded after a second
```

## What it does not do

- It stores nothing itself: there is no event store implementation, only
  the `EventStore` interface; you supply the storage.
- There are no read-model repositories or projectors, and no aggregate
  store that keeps whole aggregates in a repository. `SliceEventPublisher`
  only collects events; nothing in the package publishes them for you.
- The only event bus is the in-process `LocalEventBus`; there is no bus
  across processes or machines.
- It is a library; it has no command-line program or server.

## Running the tests

```
pip install .[test]
pytest
```