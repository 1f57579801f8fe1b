"""Development server — rebuild on every request, serve from memory.

Every GET re-reads the site definition, validates the full route table and
rebuilds only what was asked for (one route or one style sheet) through the
regular :class:`~knead.export.static.BuildOrchestrator` with a
:class:`~knead.export.writer.MemoryWriter`.  Nothing is cached between
requests, so edits to templates, data, styles or the site file show up on
the next reload without restarting the server.

Flow per request::

    GET /about
      -> load_config + load_site      (ConfigError -> 500 error page)
      -> check_unique_outputs         (ConfigError -> 500 error page)
      -> find route / style / asset   (none -> 404, site's 404.html if declared)
      -> orchestrator.run(scoped)     (errors -> 500 error page)
      -> 200 text/html | text/css

The build runs in a worker thread (``asyncio.to_thread``) so the event loop
is never blocked.  Requests are handled one at a time: a lock held for the
whole rebuild makes the server single-flight.

``GET /__knead/stats`` answers a JSON summary of the event log and the
latest requests.
"""

from __future__ import annotations

import asyncio
import errno
import json
import mimetypes
import socket
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from knead._errors import ConfigError, PortInUseError
from knead.config_loader import load_config, load_site
from knead.dev.error_page import render_error_page, render_not_found_page
from knead.export.static import BuildOrchestrator
from knead.export.writer import MemoryWriter
from knead.observability import DevRequest
from knead.site import NOT_FOUND_FILE, check_source_dirs, check_unique_outputs

if TYPE_CHECKING:
    from chirp import App

    from knead.config import KneadConfig
    from knead.observability import BuildCollector
    from knead.site import BuildContext


HTML = "text/html; charset=utf-8"
CSS = "text/css; charset=utf-8"

STATS_PATH = "/__knead/stats"


@dataclass(frozen=True, slots=True)
class DevResponse:
    """What the dev server answers for one path, independent of the HTTP layer.

    Attributes:
        status: HTTP status code.
        body: Response body (text for pages and styles, bytes for assets).
        content_type: MIME type with charset where applicable.
        artifact: Output path that was rebuilt or served (empty for 404s).

    """

    status: int
    body: str | bytes
    content_type: str = HTML
    artifact: str = ""


def ensure_port_available(host: str, port: int) -> None:
    """Raise PortInUseError if *host*:*port* cannot be bound.

    The dev server never picks another port on its own.

    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as exc:
            if exc.errno in (errno.EADDRINUSE, errno.EACCES):
                raise PortInUseError(host, port) from exc
            raise


class DevServer:
    """Serves a site by rebuilding the requested artifact on every request.

    Args:
        config: Startup configuration (fixes root, host and port).
        overrides: CLI overrides re-applied whenever the site file is reloaded.
        collector: Receives build, request and pounce lifecycle events.

    """

    __slots__ = ("_collector", "_config", "_lock", "_orchestrator", "_overrides")

    def __init__(
        self,
        config: KneadConfig,
        *,
        overrides: dict[str, object] | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self._config = config
        self._overrides = dict(overrides or {})
        self._collector = collector
        self._orchestrator = BuildOrchestrator(collector)
        # One request is handled at a time; the next waits for the lock
        self._lock = threading.Lock()

    @property
    def config(self) -> KneadConfig:
        return self._config

    @property
    def url(self) -> str:
        return self._config.dev_url

    # ------------------------------------------------------------------
    # Per-request rebuild (runs in a worker thread)
    # ------------------------------------------------------------------

    def _load_context(self) -> BuildContext:
        """Re-read configuration and site definition from disk."""
        overrides = {
            **self._overrides,
            "host": self._config.host,
            "port": self._config.port,
        }
        config = load_config(self._config.root, **overrides)
        site = load_site(config)
        context = site.context(config, dev=True)
        check_unique_outputs(context.routes, context.styles)
        check_source_dirs(context)
        return context

    def respond(self, url_path: str) -> DevResponse:
        """Rebuild and answer *url_path*.  Never raises for site errors."""
        t0 = time.perf_counter()
        with self._lock:
            try:
                context = self._load_context()
            except ConfigError as exc:
                response = DevResponse(
                    status=500,
                    body=render_error_page([exc], self._config, path=url_path),
                )
            else:
                response = self._respond_with(context, url_path)

        if self._collector is not None:
            self._collector.record_request(
                url_path,
                response.status,
                artifact=response.artifact,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return response

    def _respond_with(self, context: BuildContext, url_path: str) -> DevResponse:
        route = context.find_route(url_path)
        if route is not None:
            return self._build(context.scoped_to(route), route.output_path, url_path)

        style = context.find_style(url_path)
        if style is not None:
            return self._build(
                context.scoped_to_style(style), style.output, url_path, content_type=CSS,
            )

        asset = self._find_asset(context, url_path)
        if asset is not None:
            content_type, _ = mimetypes.guess_type(asset.name)
            return DevResponse(
                status=200,
                body=asset.read_bytes(),
                content_type=content_type or "application/octet-stream",
                artifact=url_path.lstrip("/"),
            )

        return self._not_found(context, url_path)

    def _build(
        self,
        context: BuildContext,
        output: str,
        url_path: str,
        *,
        content_type: str = HTML,
    ) -> DevResponse:
        writer = MemoryWriter(context.config.output_path, minify=False)
        report = self._orchestrator.run(context, writer=writer)
        if not report.ok:
            return DevResponse(
                status=500,
                body=render_error_page(report.errors, context.config, path=url_path),
                artifact=output,
            )
        return DevResponse(
            status=200,
            body=report.documents[output],
            content_type=content_type,
            artifact=output,
        )

    def _not_found(self, context: BuildContext, url_path: str) -> DevResponse:
        """404 using the site's own ``404.html`` route.

        If that route fails to build, its error page is answered with 404.

        """
        route = context.find_route(NOT_FOUND_FILE)
        if route is not None:
            response = self._build(context.scoped_to(route), route.output_path, url_path)
            return DevResponse(status=404, body=response.body)
        return DevResponse(status=404, body=render_not_found_page(url_path))

    def stats(self) -> dict[str, Any]:
        """Event log summary and the most recent requests, newest first."""
        if self._collector is None:
            return {"event_log": {}, "requests": []}
        log = self._collector.log
        return {
            "event_log": log.stats(),
            "requests": [
                {
                    "path": event.path,
                    "status": event.status,
                    "artifact": event.artifact,
                    "duration_ms": round(event.duration_ms, 2),
                }
                for event in log.query(event_type=DevRequest, limit=20)
            ],
        }

    @staticmethod
    def _find_asset(context: BuildContext, url_path: str) -> Path | None:
        """Map *url_path* onto a file inside a declared asset source."""
        wanted = url_path.strip("/")
        if not wanted:
            return None
        for entry in context.assets:
            if entry.source.is_file():
                if wanted == entry.destination:
                    return entry.source
                continue
            prefix = entry.destination + "/"
            if not wanted.startswith(prefix):
                continue
            root = entry.source.resolve()
            candidate = (root / wanted[len(prefix):]).resolve()
            if candidate.is_relative_to(root) and candidate.is_file():
                return candidate
        return None

    # ------------------------------------------------------------------
    # HTTP layer
    # ------------------------------------------------------------------

    def create_app(self) -> App:
        """Create the chirp App answering every GET through :meth:`respond`."""
        from chirp import App, AppConfig, Response
        from chirp.middleware import StaticFiles

        config = self._config
        app = App(config=AppConfig(
            template_dir=config.templates_path,
            static_dir=None,
            debug=False,
            host=config.host,
            port=config.port,
            workers=1,
        ))

        # Asset directories known at startup are served straight from disk;
        # anything else falls through to the rebuild handler.
        for prefix, directory in self._asset_mounts():
            app.add_middleware(
                StaticFiles(directory=directory, prefix=prefix, cache_control="no-cache"),
            )

        async def stats(request):
            return Response(
                body=json.dumps(self.stats(), indent=2),
                status=200,
                content_type="application/json",
            ).with_header("Cache-Control", "no-store")

        async def serve(request):
            result = await asyncio.to_thread(self.respond, request.path)
            return Response(
                body=result.body,
                status=result.status,
                content_type=result.content_type,
            ).with_header("Cache-Control", "no-store")

        app.route(STATS_PATH, methods=["GET"], name="knead_stats")(stats)
        app.route("/", methods=["GET"], name="knead_index")(serve)
        app.route("/{path:path}", methods=["GET"], name="knead_path")(serve)
        return app

    def _asset_mounts(self) -> list[tuple[str, Path]]:
        try:
            context = self._load_context()
        except ConfigError:
            return []
        return [
            ("/" + entry.destination, entry.source)
            for entry in context.assets
            if entry.source.is_dir()
        ]

    def run(self) -> None:
        """Check the port, then serve until interrupted.

        Raises:
            PortInUseError: If the configured port is already bound.
            ConfigError: If the site definition is invalid at startup.

        """
        self._load_context()
        ensure_port_available(self._config.host, self._config.port)
        app = self.create_app()
        app.run(
            host=self._config.host,
            port=self._config.port,
            lifecycle_collector=self._collector,
        )
