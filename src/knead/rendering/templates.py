"""Template rendering — kida environment per build, one RenderResult per route.

The renderer never raises for a bad route: missing variables, syntax errors
and missing templates or partials become a ``TemplateError`` carried in the
result so the orchestrator can keep going and report every defect at once.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import kida
from kida import Environment, FileSystemLoader, Markup

from knead._errors import CompileError, ConfigError, TemplateError
from knead.site import output_path_for, url_for

if TYPE_CHECKING:
    from knead._types import ArtifactKind, JSONMap, JSONValue, OutputPath
    from knead.config import KneadConfig
    from knead.site import Route


DEV_WARNING_SCRIPT = (
    "<script>console.warn("
    "'This is a development build served by knead. "
    "Run knead without --dev for a production build.'"
    ")</script>"
)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Outcome of rendering one route or compiling one style sheet.

    Exactly one of ``text`` and ``error`` is set.

    Attributes:
        kind: ``"page"`` or ``"style"``.
        output_path: Destination relative to the output root.
        source: Route path (pages) or style source path (styles).
        text: Rendered HTML or compiled CSS.
        error: The render or compile failure.
        duration_ms: Time spent rendering or compiling.

    """

    kind: ArtifactKind
    output_path: OutputPath
    source: str
    text: str | None = None
    error: TemplateError | CompileError | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Context handling
# ---------------------------------------------------------------------------


def merge_context(
    global_data: Mapping[str, JSONValue],
    route_data: Mapping[str, JSONValue],
) -> JSONMap:
    """Shallow-merge global and route data.  Route keys win on collision."""
    merged: JSONMap = dict(global_data)
    merged.update(route_data)
    return merged


def _check_value(value: object, where: str) -> tuple[str, object] | None:
    """Return the key path and value of the first non JSON-like value, or None."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return None
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            bad = _check_value(item, f"{where}[{i}]")
            if bad is not None:
                return bad
        return None
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                return f"{where}[{key!r}]", key
            bad = _check_value(item, f"{where}.{key}" if where else key)
            if bad is not None:
                return bad
        return None
    return where or "<root>", value


def validate_context(route_path: str, context: Mapping[str, object]) -> None:
    """Check that *context* holds only JSON-like values.

    Raises:
        TemplateError: Naming the key path of the first offending value.

    """
    bad = _check_value(context, "")
    if bad is not None:
        key_path, value = bad
        msg = (
            f"Render data at {key_path!r} is not JSON-like "
            f"(got {type(value).__name__})"
        )
        raise TemplateError(route_path, msg)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders routes through a kida Environment rooted at the templates dir.

    Create one per build so every build reads templates fresh from disk.

    Args:
        config: Frozen knead configuration.
        dev: Build for the dev server (absolute dev URL, dev warning script).

    """

    __slots__ = ("_base_url", "_config", "_dev", "_env")

    def __init__(self, config: KneadConfig, *, dev: bool = False) -> None:
        self._config = config
        self._dev = dev
        self._base_url = (config.dev_url if dev else config.base_url).rstrip("/")
        self._env = Environment(
            loader=FileSystemLoader(config.templates_path),
            autoescape=True,
            strict_undefined=True,
            auto_reload=False,
        )
        self._register_globals()

    @property
    def env(self) -> Environment:
        """The kida Environment used for this build."""
        return self._env

    def _register_globals(self) -> None:
        script = DEV_WARNING_SCRIPT if self._dev and self._config.dev_warning else ""
        self._env.add_global("URL", self._base_url)
        self._env.add_global("DEV_SCRIPT", Markup(script))
        self._env.add_global("link", self.link)
        self._env.add_global("style_href", self.style_href)

    def link(self, to: str) -> str:
        """URL of the page declared at *to* (``link("about")`` -> ``/about``)."""
        return self._base_url + url_for(output_path_for(to))

    def style_href(self, name: str) -> str:
        """URL of the compiled stylesheet *name* under the styles output dir."""
        name = name.removesuffix(".css")
        return f"{self._base_url}/{self._config.styles_dir}/{name}.css"

    def template_name(self, template_id: str) -> str:
        """Resolve a template id to a file name (adds ``template_ext`` if missing)."""
        if Path(template_id).suffix:
            return template_id
        return template_id + self._config.template_ext

    def render(
        self,
        template_id: str,
        data: Mapping[str, JSONValue] | None = None,
        global_data: Mapping[str, JSONValue] | None = None,
    ) -> str:
        """Render *template_id* to a string, *data* merged over *global_data*.

        Raises:
            TemplateError: If the data is not JSON-like or the template fails.

        """
        name = self.template_name(template_id)
        return self._render(name, merge_context(global_data or {}, data or {}), name)

    def render_route(
        self,
        route: Route,
        global_data: Mapping[str, JSONValue],
    ) -> RenderResult:
        """Render *route* with global data merged under its own data.

        Plain routes return their content unchanged.  Never raises for
        template failures; they are returned as ``RenderResult.error``.

        """
        t0 = time.perf_counter()
        try:
            output_path = route.output_path
            if route.content is not None:
                text = route.content
            else:
                name = self.template_name(route.template_id)
                text = self._render(name, merge_context(global_data, route.data), route.path)
        except (TemplateError, ConfigError) as exc:
            error = exc
            if isinstance(exc, ConfigError):
                error = TemplateError(route.path, str(exc))
            return RenderResult(
                kind="page",
                output_path=_safe_output(route.path),
                source=route.path,
                error=error,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return RenderResult(
            kind="page",
            output_path=output_path,
            source=route.path,
            text=text,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

    def _render(self, name: str, context: Mapping[str, JSONValue], source: str) -> str:
        try:
            validate_context(source, context)
        except TemplateError as exc:
            raise TemplateError(source, exc.message, template=name) from exc
        try:
            return self._env.get_template(name).render(**context)
        except kida.TemplateError as exc:
            raise TemplateError(
                source,
                str(exc),
                template=_error_template(exc) or name,
                lineno=getattr(exc, "lineno", None),
            ) from exc
        except Exception as exc:
            # Errors raised by filters or globals while rendering
            raise TemplateError(
                source, f"{type(exc).__name__}: {exc}", template=name,
            ) from exc


def _error_template(exc: kida.TemplateError) -> str | None:
    """Template name a kida error points at, if it names one."""
    attrs = ("template_name", "filename", "template")
    if isinstance(exc, kida.TemplateSyntaxError):
        attrs = (*attrs, "name")
    for attr in attrs:
        value = getattr(exc, attr, None)
        if isinstance(value, str) and value and not value.startswith("<"):
            return value
    return None


def _safe_output(path: str) -> str:
    try:
        return output_path_for(path)
    except ConfigError:
        return path
