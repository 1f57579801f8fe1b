"""Event log — queryable, thread-safe event store.

Stores a bounded ring buffer of events.  The build report prints a
summary of it and the dev server answers it at ``/__knead/stats``.
Supports querying by event type, time range and path.

Thread Safety:
    All methods are protected by a ``threading.Lock``.  Build worker
    threads and dev-server request threads may append concurrently.

"""

import threading
from collections import deque
from typing import Any

from knead.observability.events import BuildEvent, StackEvent

# Attributes consulted, in order, when filtering by path
_PATH_ATTRS = ("path", "source", "artifact", "target")


def _event_path(event: object) -> str:
    for attr in _PATH_ATTRS:
        value = getattr(event, attr, None)
        if value:
            return str(value)
    return ""


class EventLog:
    """Bounded event store with query support.

    Events are stored in a ring buffer (deque with maxlen).  When the
    buffer is full, the oldest events are discarded automatically.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Query events with optional filters.

        Args:
            event_type: Only return events of this type.
            since_ns: Only return events after this timestamp (nanoseconds).
            path: Only return events whose path/source contains this string.
            limit: Maximum number of events to return.

        Returns:
            List of matching events, most recent first.

        """
        with self._lock:
            snapshot = list(self._events)

        results: list[StackEvent] = []
        for event in reversed(snapshot):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and getattr(event, "timestamp_ns", 0) < since_ns:
                continue
            if path is not None and path not in _event_path(event):
                continue
            results.append(event)
        return results

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Return summary statistics about stored events.

        ``by_kind`` breaks build events down by their ``kind`` field.

        """
        with self._lock:
            events = list(self._events)

        type_counts: dict[str, int] = {}
        kind_counts: dict[str, int] = {}
        for event in events:
            name = type(event).__name__
            type_counts[name] = type_counts.get(name, 0) + 1
            if isinstance(event, BuildEvent):
                kind_counts[event.kind] = kind_counts.get(event.kind, 0) + 1

        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": type_counts,
            "by_kind": kind_counts,
        }
