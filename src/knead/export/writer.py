"""Output writers — persist rendered pages and compiled styles.

``OutputWriter`` mirrors declared output paths under the output root on disk.
``MemoryWriter`` keeps the final text in a dict; the dev server uses it to
answer requests without touching the output directory.

Both minify before storing when asked to.  A minifier failure is downgraded
to a warning and the unminified text is stored instead.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from knead._errors import MinifyError, WriteError
from knead.export.minify import minify_css, minify_html
from knead.export.static import ExportedFile

if TYPE_CHECKING:
    from knead._types import OutputPath
    from knead.export.static import SourceType
    from knead.rendering import RenderResult


@dataclass(frozen=True, slots=True)
class WriteOutcome:
    """Result of writing one artifact.

    Attributes:
        file: Record of the written file (None on failure).
        error: The write failure, if any.
        warning: Non-fatal note (e.g., minification fell back to raw text).

    """

    file: ExportedFile | None = None
    error: WriteError | None = None
    warning: str | None = None


class _Writer(ABC):
    """Shared minify step for disk and in-memory writers."""

    in_memory = False

    def __init__(self, root: Path, *, minify: bool = True) -> None:
        self.root = root
        self.minify = minify

    def write(self, result: RenderResult) -> WriteOutcome:
        """Minify (if enabled) and store one successful render result."""
        if result.text is None:
            msg = f"Cannot write failed result for {result.source!r}"
            raise ValueError(msg)
        text, warning = self._minified(result)
        source_type: SourceType = "page" if result.kind == "page" else "style"
        outcome = self.write_text(
            result.output_path, text, source=result.source, source_type=source_type,
        )
        if warning is None:
            return outcome
        return WriteOutcome(file=outcome.file, error=outcome.error, warning=warning)

    def _minified(self, result: RenderResult) -> tuple[str, str | None]:
        text = result.text or ""
        if not self.minify:
            return text, None
        minifier = minify_html if result.kind == "page" else minify_css
        try:
            return minifier(text), None
        except MinifyError as exc:
            return text, f"{result.output_path}: {exc} (written unminified)"

    @abstractmethod
    def write_text(
        self,
        output_path: OutputPath,
        text: str,
        *,
        source: str,
        source_type: SourceType,
    ) -> WriteOutcome:
        """Store *text* at *output_path* and describe the stored file."""


class OutputWriter(_Writer):
    """Writes artifacts under ``root``, creating directories and overwriting.

    Args:
        root: Output root directory.
        minify: Minify HTML and CSS before writing.

    """

    def write_text(
        self,
        output_path: OutputPath,
        text: str,
        *,
        source: str,
        source_type: SourceType,
    ) -> WriteOutcome:
        """Write *text* to ``root / output_path`` as UTF-8."""
        t0 = time.perf_counter()
        filepath = self.root / output_path
        data = text.encode("utf-8")
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as exc:
            return WriteOutcome(error=WriteError(filepath, exc.strerror or str(exc)))
        return WriteOutcome(file=ExportedFile(
            source_path=source,
            output_path=filepath,
            source_type=source_type,
            size_bytes=len(data),
            duration_ms=(time.perf_counter() - t0) * 1000,
        ))


class MemoryWriter(_Writer):
    """Collects final text per output path instead of writing files.

    Attributes:
        documents: Output path -> final (possibly minified) text.

    """

    in_memory = True

    def __init__(self, root: Path, *, minify: bool = True) -> None:
        super().__init__(root, minify=minify)
        self.documents: dict[str, str] = {}

    def write_text(
        self,
        output_path: OutputPath,
        text: str,
        *,
        source: str,
        source_type: SourceType,
    ) -> WriteOutcome:
        self.documents[output_path] = text
        return WriteOutcome(file=ExportedFile(
            source_path=source,
            output_path=self.root / output_path,
            source_type=source_type,
            size_bytes=len(text.encode("utf-8")),
            duration_ms=0.0,
        ))
