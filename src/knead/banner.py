"""Status output — startup banner and build summary on stderr.

Prints a short, mode-aware banner with timing and counts, and the final
report of a production build.  Detects ``NO_COLOR`` / ``TERM`` for safe
fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from knead._types import KneadMode
    from knead.config import KneadConfig
    from knead.export.static import BuildReport
    from knead.observability import EventLog


# ---------------------------------------------------------------------------
# ANSI helpers — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""


_MODE_STYLES: dict[str, tuple[str, str]] = {
    "dev": (_GREEN, "dev"),
    "build": (_YELLOW, "build"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: KneadConfig,
    route_count: int,
    mode: KneadMode,
    *,
    style_count: int = 0,
    asset_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the knead startup banner to stderr.

    Args:
        config: Resolved KneadConfig.
        route_count: Number of declared routes.
        mode: ``"dev"`` or ``"build"``.
        style_count: Number of style entries.
        asset_count: Number of asset entries.
        load_ms: Time spent loading the site definition in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from knead import __version__

    header = f"  {_BOLD}knead{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}"
    lines: list[str] = ["", header, f"  {_DIM}{'─' * 43}{_RESET}"]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {_plural(route_count, 'route')} declared{timing}")
    if style_count:
        lines.append(f"  {_DIM}├─{_RESET} {_plural(style_count, 'style sheet')}")
    if asset_count:
        entries = "entry" if asset_count == 1 else "entries"
        lines.append(f"  {_DIM}├─{_RESET} {asset_count} asset {entries}")
    lines.append(f"  {_DIM}├─{_RESET} templates: {_DIM}{config.templates_path}{_RESET}")

    if mode == "build":
        lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")
    else:
        lines.append(f"  {_DIM}└─{_RESET} rebuilds on every request")
        lines.append("")
        lines.append(f"  {_clickable_url(config.dev_url)}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    print("\n".join(lines), file=sys.stderr)


def print_report(report: BuildReport, log: EventLog | None = None) -> None:
    """Print a build report to stderr: every error, every warning, then totals.

    With the build's event log, also prints the step counts and the slowest
    page render.

    """
    lines: list[str] = [""]

    for error in report.errors:
        lines.append(f"  {_RED}✗{_RESET} {error}")
    for warning in report.warnings:
        lines.append(f"  {_YELLOW}!{_RESET} {warning}")
    if report.errors or report.warnings:
        lines.append("")

    lines.append("─" * 41)
    lines.append(f"  Wrote {_plural(report.routes_written, 'page')}")
    if report.styles_written:
        lines.append(f"  Wrote {_plural(report.styles_written, 'style sheet')}")
    if report.assets_copied:
        lines.append(f"  Copied {_plural(report.assets_copied, 'asset')}")
    if log is not None:
        lines.extend(_log_summary(log))
    lines.append(f"  Output: {report.output_dir}")

    if report.ok:
        lines.append(f"  {_GREEN}Done{_RESET} in {report.duration_ms:.0f}ms")
    else:
        lines.append(
            f"  {_RED}Failed{_RESET} with {_plural(len(report.errors), 'error')} "
            f"in {report.duration_ms:.0f}ms"
        )

    print("\n".join(lines), file=sys.stderr)


def _log_summary(log: EventLog) -> list[str]:
    from knead.observability import BuildEvent

    lines: list[str] = []
    kinds = log.stats()["by_kind"]
    if kinds:
        steps = ", ".join(f"{count} {kind}" for kind, count in kinds.items())
        lines.append(f"  {_DIM}Steps: {steps}{_RESET}")
    renders = [
        event for event in log.query(event_type=BuildEvent, limit=len(log))
        if event.kind == "render"
    ]
    if renders:
        slowest = max(renders, key=lambda event: event.duration_ms)
        lines.append(
            f"  {_DIM}Slowest page: {slowest.source} ({slowest.duration_ms:.0f}ms){_RESET}"
        )
    return lines
