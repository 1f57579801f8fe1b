"""Renderer adapter — kida for pages, libsass for style sheets."""

from knead.rendering.styles import compile_source, render_style
from knead.rendering.templates import (
    RenderResult,
    TemplateRenderer,
    merge_context,
    validate_context,
)

__all__ = [
    "RenderResult",
    "TemplateRenderer",
    "compile_source",
    "merge_context",
    "render_style",
    "validate_context",
]
