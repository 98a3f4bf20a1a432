[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eventhorizon"
version = "0.1.0"
description = "A CQRS and event sourcing toolkit: events, commands, aggregates, an event sourced aggregate store, an in-process event bus, sagas and waiters."
requires-python = ">=3.10"
dependencies = []
keywords = ["cqrs", "event-sourcing", "ddd", "aggregate", "event-bus", "saga"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["eventhorizon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
