"""knead error hierarchy.

All knead-specific errors inherit from KneadError for easy catching.

Configuration and startup errors (``ConfigError``, ``PortInUseError``) are
raised.  Per-item build errors (``TemplateError``, ``CompileError``,
``WriteError``) are carried as values inside a ``BuildReport`` so one build
surfaces every defect.  ``MinifyError`` never leaves the output writer.
"""

from __future__ import annotations

from pathlib import Path


class KneadError(Exception):
    """Base error for all knead operations."""


class ConfigError(KneadError):
    """Invalid or missing configuration (duplicate outputs, bad site file)."""


class TemplateError(KneadError):
    """A route failed to render.

    Attributes:
        route_path: Declared path of the failing route.
        message: The template engine's diagnostic, verbatim.
        template: Template name, when known.
        lineno: Line within the template source, when known.

    """

    def __init__(
        self,
        route_path: str,
        message: str,
        *,
        template: str | None = None,
        lineno: int | None = None,
    ) -> None:
        self.route_path = route_path
        self.message = message
        self.template = template
        self.lineno = lineno
        super().__init__(f"Failed to render route {route_path!r}: {message}")


class CompileError(KneadError):
    """A style sheet failed to compile.

    Attributes:
        source: Path of the style sheet source.
        message: The style compiler's diagnostic, verbatim.
        line: 1-based line of the error, when reported.
        column: 1-based column of the error, when reported.

    """

    def __init__(
        self,
        source: Path,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.source = source
        self.message = message
        self.line = line
        self.column = column
        where = f"{source}:{line}:{column}" if line is not None else str(source)
        super().__init__(f"Failed to compile style {where}: {message}")


class MinifyError(KneadError):
    """A minifier rejected its input.  Non-fatal: output is written unminified."""


class WriteError(KneadError):
    """Writing or copying a file failed.

    Attributes:
        path: The filesystem path that could not be written.

    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Failed to write {path}: {message}")


class PortInUseError(KneadError):
    """The dev server port is already bound by another process."""

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port
        super().__init__(f"Port {port} on {host} is already in use")
