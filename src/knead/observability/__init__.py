"""Observability — structured events for builds and the dev server.

Aggregates events from:
- **Builds**: render, compile, write, asset copy and minify fallbacks
- **Dev server**: one event per rebuild-on-request
- **Pounce**: connection lifecycle (when passed as ``lifecycle_collector``)

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from multiple threads.

Quick Start:
    >>> from knead.observability import BuildCollector, EventLog
    >>> log = EventLog()
    >>> collector = BuildCollector(log)
    >>> # BuildOrchestrator(collector).run(context)
    >>> log.stats()["by_kind"]

"""

from knead.observability.collector import BuildCollector
from knead.observability.events import (
    BuildEvent,
    BuildFinished,
    DevRequest,
    StackEvent,
    now_ns,
)
from knead.observability.log import EventLog

__all__ = [
    "BuildCollector",
    "BuildEvent",
    "BuildFinished",
    "DevRequest",
    "EventLog",
    "StackEvent",
    "now_ns",
]
