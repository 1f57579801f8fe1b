"""Static build — render every route and style, write them, copy assets.

The orchestrator drives one build of a :class:`~knead.site.BuildContext`:

    1. Validate output paths, the templates directory and the clean
       target (``ConfigError`` before any side effect)
    2. Render all routes and compile all styles
    3. Clean the output root (only when ``config.clean``)
    4. Write pages, then styles, then the sitemap (if ``base_url`` is set)
    5. Copy assets

Render, compile and write failures are collected into the returned
:class:`BuildReport` instead of aborting, so one build surfaces every
defect.  The same orchestrator serves the dev server with a
:class:`~knead.export.writer.MemoryWriter`.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal

from knead._errors import WriteError
from knead.site import check_source_dirs, check_unique_outputs

if TYPE_CHECKING:
    from collections.abc import Sequence

    from knead._errors import KneadError
    from knead.export.writer import MemoryWriter, OutputWriter
    from knead.observability import BuildCollector
    from knead.rendering import RenderResult
    from knead.site import BuildContext, Route, StyleEntry


type SourceType = Literal["page", "style", "asset", "sitemap"]

type BuildStatus = Literal["success", "failure"]


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Record of a single file written during a build.

    Attributes:
        source_path: Logical source (route path, style or asset source).
        output_path: Absolute filesystem path of the written file.
        source_type: Category of the written file.
        size_bytes: Size of the written file in bytes.
        duration_ms: Time taken to write this file.

    """

    source_path: str
    output_path: Path
    source_type: SourceType
    size_bytes: int
    duration_ms: float


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Aggregate result of one build.

    Attributes:
        status: ``"success"`` iff ``errors`` is empty.
        errors: Every render, compile and write failure, in declaration
            order (routes first, then styles, then assets).
        warnings: Non-fatal notes such as minification fallbacks.
        files: All files written (or stored, for in-memory builds).
        routes_written: Number of pages written.
        styles_written: Number of style sheets written.
        assets_copied: Number of asset files copied.
        documents: Output path -> final text, for in-memory builds.
        duration_ms: Total wall-clock time for the build.
        output_dir: Absolute path to the output directory.

    """

    status: BuildStatus
    errors: tuple[KneadError, ...] = ()
    warnings: tuple[str, ...] = ()
    files: tuple[ExportedFile, ...] = ()
    routes_written: int = 0
    styles_written: int = 0
    assets_copied: int = 0
    documents: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    duration_ms: float = 0.0
    output_dir: Path | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class BuildOrchestrator:
    """Runs builds and records each step in an optional collector.

    Args:
        collector: Observability collector receiving ``BuildEvent`` records.

    """

    __slots__ = ("_collector",)

    def __init__(self, collector: BuildCollector | None = None) -> None:
        self._collector = collector

    def run(
        self,
        context: BuildContext,
        *,
        writer: OutputWriter | MemoryWriter | None = None,
    ) -> BuildReport:
        """Build *context* and return the report.

        Args:
            context: Frozen routes, styles, assets and configuration.
            writer: Destination for rendered output.  Defaults to an
                :class:`OutputWriter` on ``config.output_path``.

        Raises:
            ConfigError: If two routes or styles share an output path, a
                path escapes the output root, the templates directory is
                missing, or a clean build would delete site sources.
                Nothing is written.

        """
        from knead.export.assets import check_clean_target, clean_output, copy_assets
        from knead.export.writer import OutputWriter

        config = context.config
        check_unique_outputs(context.routes, context.styles)
        check_source_dirs(context)

        start = time.perf_counter()
        if writer is None:
            writer = OutputWriter(config.output_path, minify=config.minify)
        if config.clean and not writer.in_memory:
            check_clean_target(writer.root, context)

        page_results, style_results = self._render_all(context)

        errors: list[KneadError] = []
        warnings: list[str] = []
        files: list[ExportedFile] = []

        if config.clean and not writer.in_memory:
            try:
                clean_output(writer.root)
            except WriteError as exc:
                errors.append(exc)

        routes_written = self._write_results(page_results, writer, files, errors, warnings)
        styles_written = self._write_results(style_results, writer, files, errors, warnings)

        if config.base_url and config.sitemap and not context.dev and routes_written:
            self._write_sitemap(context, page_results, writer, files, errors)

        assets_copied = 0
        if not writer.in_memory:
            for entry in context.assets:
                t0 = time.perf_counter()
                asset_files, asset_errors = copy_assets((entry,), writer.root)
                files.extend(asset_files)
                errors.extend(asset_errors)
                assets_copied += len(asset_files)
                self._record(
                    "copy_asset", str(entry.source), entry.destination,
                    (time.perf_counter() - t0) * 1000,
                )

        report = BuildReport(
            status="failure" if errors else "success",
            errors=tuple(errors),
            warnings=tuple(warnings),
            files=tuple(files),
            routes_written=routes_written,
            styles_written=styles_written,
            assets_copied=assets_copied,
            documents=MappingProxyType(dict(getattr(writer, "documents", {}))),
            duration_ms=(time.perf_counter() - start) * 1000,
            output_dir=writer.root,
        )
        if self._collector is not None:
            self._collector.record_report(report)
        return report

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _render_all(
        self, context: BuildContext,
    ) -> tuple[list[RenderResult], list[RenderResult]]:
        """Render every route and compile every style, in declaration order."""
        from knead.rendering import TemplateRenderer, render_style

        config = context.config
        renderer = TemplateRenderer(config, dev=context.dev)

        def page(route: Route) -> RenderResult:
            return renderer.render_route(route, context.global_data)

        def style(entry: StyleEntry) -> RenderResult:
            return render_style(entry, config)

        if config.workers > 1 and len(context.routes) + len(context.styles) > 1:
            with ThreadPoolExecutor(max_workers=config.workers) as pool:
                page_results = list(pool.map(page, context.routes))
                style_results = list(pool.map(style, context.styles))
        else:
            page_results = [page(route) for route in context.routes]
            style_results = [style(entry) for entry in context.styles]

        for result in (*page_results, *style_results):
            self._record(
                "render" if result.kind == "page" else "compile",
                result.source, result.output_path, result.duration_ms,
            )
        return page_results, style_results

    def _write_results(
        self,
        results: Sequence[RenderResult],
        writer: OutputWriter | MemoryWriter,
        files: list[ExportedFile],
        errors: list[KneadError],
        warnings: list[str],
    ) -> int:
        written = 0
        for result in results:
            if result.error is not None:
                errors.append(result.error)
                continue
            outcome = writer.write(result)
            if outcome.warning is not None:
                warnings.append(outcome.warning)
                self._record("minify_fallback", result.source, result.output_path)
            if outcome.error is not None:
                errors.append(outcome.error)
                continue
            if outcome.file is not None:
                files.append(outcome.file)
                written += 1
                self._record(
                    "write", result.source, str(outcome.file.output_path),
                    outcome.file.duration_ms,
                )
        return written

    def _write_sitemap(
        self,
        context: BuildContext,
        page_results: Sequence[RenderResult],
        writer: OutputWriter | MemoryWriter,
        files: list[ExportedFile],
        errors: list[KneadError],
    ) -> None:
        from knead.export.sitemap import SITEMAP_FILE, generate_sitemap

        written = {r.source for r in page_results if r.ok}
        routes = [route for route in context.routes if route.path in written]
        xml = generate_sitemap(routes, context.config.base_url)
        outcome = writer.write_text(
            SITEMAP_FILE, xml, source="/" + SITEMAP_FILE, source_type="sitemap",
        )
        if outcome.error is not None:
            errors.append(outcome.error)
        elif outcome.file is not None:
            files.append(outcome.file)
            self._record("generate_sitemap", "/" + SITEMAP_FILE, str(outcome.file.output_path))

    def _record(
        self, kind: str, source: str, target: str, duration_ms: float = 0.0,
    ) -> None:
        if self._collector is not None:
            self._collector.record_build(kind, source, target, duration_ms=duration_ms)

