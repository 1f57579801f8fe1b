"""Minifiers for written output.

HTML goes through minify-html, CSS through csscompressor.  Both functions
are total from the writer's point of view: any failure inside a minifier
is re-raised as ``MinifyError`` and the writer falls back to the
unminified text.
"""

from __future__ import annotations

import csscompressor
import minify_html as _minify_html

from knead._errors import MinifyError


def minify_html(html: str) -> str:
    """Collapse whitespace in *html* while keeping comments and the doctype.

    Closing tags and the ``<html>``/``<head>`` opening tags are kept so the
    output stays readable by tools that do not implement HTML5's optional
    tag rules.

    """
    try:
        return _minify_html.minify(
            html,
            keep_comments=True,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
            minify_doctype=False,
        )
    except Exception as exc:
        msg = f"HTML minification failed: {exc}"
        raise MinifyError(msg) from exc


def minify_css(css: str) -> str:
    """Strip comments and whitespace from *css*."""
    try:
        return csscompressor.compress(css)
    except Exception as exc:
        msg = f"CSS minification failed: {exc}"
        raise MinifyError(msg) from exc
