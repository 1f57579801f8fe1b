"""Dev-mode error pages — render build failures as styled HTML.

Provides two pages:
1. ``render_error_page`` — every error of a failed dev build, each with the
   surrounding template or style source when a line is known.
2. ``render_not_found_page`` — fallback 404 for sites without a ``404.html``
   route.

Both pages use inline CSS so they render even when the site's own
assets are broken.
"""

from __future__ import annotations

import html
import linecache
from pathlib import Path
from typing import TYPE_CHECKING

from knead._errors import CompileError, TemplateError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from knead.config import KneadConfig


# ---------------------------------------------------------------------------
# Page templates (inline CSS)
# ---------------------------------------------------------------------------

_STYLE = """\
*,*::before,*::after{box-sizing:border-box}
body{margin:0;font-family:ui-monospace,SFMono-Regular,Menlo,Monaco,Consolas,monospace;
  background:#1a1a1a;color:#e0e0e0;line-height:1.6}
.overlay{max-width:860px;margin:2rem auto;padding:0 1.5rem}
.summary{color:#9e9e9e;font-size:0.85rem;margin-bottom:1rem}
.error{margin-bottom:2rem}
.error-header{background:#2d1010;border:1px solid #e74c3c;border-radius:8px;
  padding:1.25rem 1.5rem;margin-bottom:0.75rem}
.error-header h1{margin:0;font-size:1rem;color:#e74c3c;font-weight:600}
.error-header .message{margin:0.5rem 0 0;font-size:0.95rem;color:#f0a0a0;
  word-break:break-word;white-space:pre-wrap}
.source{background:#1e1e1e;border:1px solid #3a3a3a;border-radius:8px;
  padding:1rem 0;overflow-x:auto}
.source .file{padding:0 1.25rem;margin-bottom:0.75rem;font-size:0.8rem;color:#9e9e9e}
.source pre{margin:0;padding:0;font-size:0.85rem}
.source .line{display:block;padding:0 1.25rem;white-space:pre}
.source .line.error-line{background:#3a1515;border-left:3px solid #e74c3c}
.source .line .num{display:inline-block;width:3.5rem;color:#757575;
  text-align:right;padding-right:1rem;user-select:none}
.actions button{padding:0.5rem 1.25rem;border-radius:6px;border:1px solid #e74c3c;
  background:#e74c3c;color:#fff;cursor:pointer;font-size:0.85rem;font-family:inherit}
.actions button:hover{background:#c0392b}
code{color:#f0a0a0}
"""

_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>
{style}</style>
</head>
<body>
<div class="overlay">
{body}
</div>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Source context extraction
# ---------------------------------------------------------------------------

def _extract_source_context(
    filename: str,
    lineno: int,
    context: int = 5,
) -> str:
    """Read source lines around the error and render as HTML."""
    if not filename or lineno <= 0:
        return ""

    # Sources change between requests; never serve stale lines
    linecache.checkcache(filename)

    start = max(1, lineno - context)
    end = lineno + context

    lines_html: list[str] = []
    found = False
    for i in range(start, end + 1):
        line = linecache.getline(filename, i)
        if not line and i > lineno:
            break
        found = found or bool(line)
        escaped = html.escape(line.rstrip())
        cls = ' class="line error-line"' if i == lineno else ' class="line"'
        lines_html.append(
            f'<span{cls}><span class="num">{i}</span>{escaped}</span>'
        )

    if not found:
        return ""

    escaped_file = html.escape(filename)
    return (
        f'<div class="source">'
        f'<div class="file">{escaped_file}:{lineno}</div>'
        f'<pre>{"".join(lines_html)}</pre>'
        f'</div>'
    )


def _error_location(exc: BaseException, config: KneadConfig) -> tuple[str, int]:
    """Return the source file and line an error points at, if known."""
    if isinstance(exc, TemplateError) and exc.template and exc.lineno:
        path = Path(exc.template)
        if not path.is_absolute():
            path = config.templates_path / path
        return str(path), exc.lineno
    if isinstance(exc, CompileError) and exc.line:
        return str(exc.source), exc.line
    return "", 0


def _error_section(exc: BaseException, config: KneadConfig) -> str:
    filename, lineno = _error_location(exc, config)
    return (
        '<div class="error">'
        '<div class="error-header">'
        f"<h1>{html.escape(type(exc).__qualname__)}</h1>"
        f'<p class="message">{html.escape(str(exc))}</p>'
        "</div>"
        f"{_extract_source_context(filename, lineno)}"
        "</div>"
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def render_error_page(
    errors: Sequence[BaseException],
    config: KneadConfig,
    *,
    path: str = "/",
) -> str:
    """Render every error of a failed dev build as one HTML page."""
    count = len(errors)
    summary = (
        f'<p class="summary">{count} error{"s" if count != 1 else ""} '
        f"while building <code>{html.escape(path)}</code></p>"
    )
    sections = "\n".join(_error_section(exc, config) for exc in errors)
    actions = (
        '<div class="actions">'
        '<button onclick="location.reload()">Reload</button>'
        "</div>"
    )
    return _PAGE.format(
        title="knead — Build error",
        style=_STYLE,
        body=f"{summary}\n{sections}\n{actions}",
    )


def render_not_found_page(path: str) -> str:
    """Render the fallback 404 page naming the requested *path*."""
    body = (
        '<div class="error-header">'
        "<h1>404 Not Found</h1>"
        f'<p class="message">No route, style or asset is declared for '
        f"<code>{html.escape(path)}</code></p>"
        "</div>"
    )
    return _PAGE.format(title="knead — Not found", style=_STYLE, body=body)
