"""Event model for build and dev-server observability.

Pounce lifecycle events are stored alongside these when the collector is
handed to the dev server as its lifecycle collector.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal

type BuildEventKind = Literal[
    "render",
    "compile",
    "write",
    "copy_asset",
    "minify_fallback",
    "generate_sitemap",
]


# ---------------------------------------------------------------------------
# Build pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildEvent:
    """A build-pipeline action occurred.

    Attributes:
        kind: The type of build action.
        source: Route path, style source or asset source.
        target: Output path (or description).
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: BuildEventKind
    source: str
    target: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildFinished:
    """A whole build (production or one dev request) completed.

    Attributes:
        status: ``"success"`` or ``"failure"``.
        routes: Number of pages written.
        styles: Number of style sheets written.
        assets: Number of asset files copied.
        errors: Number of accumulated errors.
        duration_ms: Wall-clock build time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    status: Literal["success", "failure"]
    routes: int
    styles: int
    assets: int
    errors: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Dev server events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DevRequest:
    """The dev server answered a request by rebuilding.

    Attributes:
        path: Requested URL path.
        status: HTTP status code of the response.
        artifact: Output path that was rebuilt (empty for 404s).
        duration_ms: Rebuild-and-respond time in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    status: int
    artifact: str
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = BuildEvent | BuildFinished | DevRequest


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
