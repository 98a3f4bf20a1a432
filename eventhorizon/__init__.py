"""A CQRS and event sourcing toolkit: events, commands, aggregates, contexts, buses and handlers."""

__version__ = "0.1.0"