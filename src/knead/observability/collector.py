"""Build collector — records build steps and dev requests into an EventLog.

Also implements Pounce's ``LifecycleCollector`` protocol (duck-typed
``record()``), so the dev server hands the same collector to the HTTP
server and connection events land in the same log as build events.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from build worker threads and request threads.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from knead.observability.events import BuildEvent, BuildFinished, DevRequest, now_ns
from knead.observability.log import EventLog

if TYPE_CHECKING:
    from knead.export.static import BuildReport
    from knead.observability.events import BuildEventKind


class BuildCollector:
    """Event collector shared by the orchestrator and the dev server.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pounce LifecycleCollector protocol -----

    def record(self, event: Any) -> None:
        """Record a Pounce lifecycle event.

        Pounce events are frozen dataclasses and are stored as-is.

        """
        self._log.append(event)

    # ----- Build events -----

    def record_build(
        self,
        kind: BuildEventKind,
        source: str,
        target: str,
        *,
        duration_ms: float = 0.0,
    ) -> None:
        """Record one build pipeline step."""
        self._log.append(
            BuildEvent(
                kind=kind,
                source=source,
                target=target,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_report(self, report: BuildReport) -> None:
        """Record the completion of a build."""
        self._log.append(
            BuildFinished(
                status=report.status,
                routes=report.routes_written,
                styles=report.styles_written,
                assets=report.assets_copied,
                errors=len(report.errors),
                duration_ms=report.duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Dev server events -----

    def record_request(
        self,
        path: str,
        status: int,
        *,
        artifact: str = "",
        duration_ms: float = 0.0,
    ) -> None:
        """Record a dev-server request answered by a rebuild."""
        self._log.append(
            DevRequest(
                path=path,
                status=status,
                artifact=artifact,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
