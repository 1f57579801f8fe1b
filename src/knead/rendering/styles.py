"""Style compilation — SCSS/Sass through libsass, plain CSS passed through."""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING

import sass

from knead._errors import CompileError
from knead.rendering.templates import RenderResult

if TYPE_CHECKING:
    from knead.config import KneadConfig
    from knead.site import StyleEntry


# libsass reports positions as "on line 3:14 of styles/main.scss"
_POSITION = re.compile(r"on line (\d+):(\d+)")


def compile_source(entry: StyleEntry, config: KneadConfig) -> str:
    """Compile *entry* to CSS text.

    Imports resolve against the source's own directory and the styles dir.

    Raises:
        CompileError: With line and column when libsass reports them.

    """
    source = entry.source
    if source.suffix == ".css":
        try:
            return source.read_text(encoding="utf-8")
        except OSError as exc:
            raise CompileError(source, str(exc)) from exc

    if not source.is_file():
        raise CompileError(source, "Style sheet not found")

    include_paths = [str(source.parent)]
    if config.styles_path.is_dir() and config.styles_path != source.parent:
        include_paths.append(str(config.styles_path))
    try:
        return sass.compile(
            filename=str(source),
            include_paths=include_paths,
            output_style="expanded",
        )
    except sass.CompileError as exc:
        message = str(exc).strip()
        match = _POSITION.search(message)
        line, column = (int(match[1]), int(match[2])) if match else (None, None)
        raise CompileError(source, message, line=line, column=column) from exc


def render_style(entry: StyleEntry, config: KneadConfig) -> RenderResult:
    """Compile one style entry.  Never raises; failures land in ``error``."""
    t0 = time.perf_counter()
    try:
        css = compile_source(entry, config)
    except CompileError as exc:
        return RenderResult(
            kind="style",
            output_path=entry.output,
            source=str(entry.source),
            error=exc,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
    return RenderResult(
        kind="style",
        output_path=entry.output,
        source=str(entry.source),
        text=css,
        duration_ms=(time.perf_counter() - t0) * 1000,
    )
