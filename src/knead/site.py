"""Site model — routes, style entries, asset entries and the build context.

A :class:`Site` is the mutable builder that user code (or the site file
loader) fills in.  :meth:`Site.context` freezes it into a
:class:`BuildContext`, the read-only input of one build invocation.

Output path convention::

    "/"              -> "index.html"
    "about"          -> "about.html"
    "/about.html"    -> "about.html"
    "/docs/"         -> "docs/index.html"
    "post/first"     -> "post/first.html"

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from knead._errors import ConfigError

if TYPE_CHECKING:
    from knead._types import JSONValue, OutputPath, RoutePath
    from knead.config import KneadConfig


INDEX_FILE = "index.html"
NOT_FOUND_FILE = "404.html"

_EMPTY: Mapping[str, JSONValue] = MappingProxyType({})


def _clean_parts(path: str, what: str) -> list[str]:
    """Split *path* into safe relative segments or raise ConfigError."""
    parts = [p for p in path.replace("\\", "/").split("/") if p and p != "."]
    if ".." in parts:
        msg = f"{what} {path!r} escapes the output directory"
        raise ConfigError(msg)
    if parts and parts[0].endswith(":"):
        msg = f"{what} {path!r} must be relative to the output directory"
        raise ConfigError(msg)
    return parts


def output_path_for(path: RoutePath) -> OutputPath:
    """Normalise a declared route path to its file path under the output root."""
    parts = _clean_parts(path.strip(), "Route path")
    if not parts:
        return INDEX_FILE
    if path.rstrip().endswith("/"):
        return "/".join([*parts, INDEX_FILE])
    if not parts[-1].endswith(".html"):
        parts[-1] += ".html"
    return "/".join(parts)


def normalize_output(path: str, what: str = "Output path") -> OutputPath:
    """Normalise a style or asset destination (no suffix rewriting)."""
    parts = _clean_parts(path.strip(), what)
    if not parts:
        msg = f"{what} {path!r} is empty"
        raise ConfigError(msg)
    return "/".join(parts)


def url_for(output: OutputPath) -> str:
    """Return the canonical URL for a page output path."""
    if output == INDEX_FILE:
        return "/"
    if output.endswith("/" + INDEX_FILE):
        return "/" + output[: -len(INDEX_FILE)]
    return "/" + output.removesuffix(".html")


def _freeze_data(data: Mapping[str, JSONValue] | None) -> Mapping[str, JSONValue]:
    if not data:
        return _EMPTY
    if not isinstance(data, Mapping):
        msg = f"Render data must be a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return MappingProxyType(dict(data))


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Route:
    """One page of the site.

    Attributes:
        path: Declared URL/output path.
        template_id: Template name under the templates directory (empty for
            plain pages).
        data: Render context for this page (JSON-like values, may be empty).
        content: Raw page text written as-is instead of rendering a template.

    """

    path: RoutePath
    template_id: str
    data: Mapping[str, JSONValue] = field(default_factory=lambda: _EMPTY)
    content: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _freeze_data(self.data))

    @property
    def is_plain(self) -> bool:
        """True for pages written from raw content without a template."""
        return self.content is not None

    @property
    def output_path(self) -> OutputPath:
        """File path of this page relative to the output root."""
        return output_path_for(self.path)

    @property
    def url(self) -> str:
        """Canonical URL this page is served at."""
        return url_for(self.output_path)


@dataclass(frozen=True, slots=True)
class StyleEntry:
    """A style sheet source and its destination in the output tree."""

    source: Path
    output: OutputPath

    def __post_init__(self) -> None:
        object.__setattr__(self, "output", normalize_output(self.output, "Style output"))


@dataclass(frozen=True, slots=True)
class AssetEntry:
    """A static file or directory copied verbatim to ``destination``."""

    source: Path
    destination: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "destination", normalize_output(self.destination, "Asset destination"),
        )


def check_unique_outputs(
    routes: Iterable[Route],
    styles: Iterable[StyleEntry] = (),
) -> None:
    """Raise ConfigError if any two routes/styles share an output file.

    Also surfaces unsafe paths (``..`` segments) for every route, so a bad
    route table fails as a whole before anything is rendered.

    """
    owners: dict[str, str] = {}
    duplicates: list[str] = []

    for route in routes:
        output = route.output_path
        label = f"route {route.path!r}"
        if output in owners:
            duplicates.append(f"{output} ({owners[output]} and {label})")
        else:
            owners[output] = label

    for style in styles:
        label = f"style {str(style.source)!r}"
        if style.output in owners:
            duplicates.append(f"{style.output} ({owners[style.output]} and {label})")
        else:
            owners[style.output] = label

    if duplicates:
        msg = "Duplicate output paths: " + "; ".join(duplicates)
        raise ConfigError(msg)


def check_source_dirs(context: BuildContext) -> None:
    """Raise ConfigError if template routes are declared without a templates directory."""
    templates = context.config.templates_path
    if templates.is_dir():
        return
    if any(not route.is_plain for route in context.routes):
        msg = f"Templates directory {templates} does not exist"
        raise ConfigError(msg)


# ---------------------------------------------------------------------------
# Build context
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Everything one build invocation reads.

    Owned by the orchestrator for the duration of a build; renderer and
    writer only read it.

    Attributes:
        config: Frozen knead configuration.
        routes: Routes in declaration order.
        styles: Style entries in declaration order.
        assets: Asset entries in declaration order.
        global_data: Render context shared by every route.
        dev: True when building for the dev server.

    """

    config: KneadConfig
    routes: tuple[Route, ...] = ()
    styles: tuple[StyleEntry, ...] = ()
    assets: tuple[AssetEntry, ...] = ()
    global_data: Mapping[str, JSONValue] = field(default_factory=lambda: _EMPTY)
    dev: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "global_data", _freeze_data(self.global_data))

    def find_route(self, url_path: str) -> Route | None:
        """Return the route serving *url_path*, trying ``path.html`` then ``path/index.html``."""
        try:
            candidates = [output_path_for(url_path)]
            if not url_path.endswith((".html", "/")):
                candidates.append(output_path_for(url_path + "/"))
        except ConfigError:
            return None
        for candidate in candidates:
            for route in self.routes:
                if route.output_path == candidate:
                    return route
        return None

    def find_style(self, url_path: str) -> StyleEntry | None:
        """Return the style entry whose output is *url_path*."""
        wanted = url_path.strip("/")
        for style in self.styles:
            if style.output == wanted:
                return style
        return None

    def scoped_to(self, route: Route) -> BuildContext:
        """A context rendering only *route* (dev-server per-route rebuild)."""
        return replace(self, routes=(route,), styles=(), assets=())

    def scoped_to_style(self, style: StyleEntry) -> BuildContext:
        """A context compiling only *style*."""
        return replace(self, routes=(), styles=(style,), assets=())


class Site:
    """Mutable site definition builder.

    Example::

        site = Site()
        site.set_globals({"site_title": "My Site"})
        site.index("home", {"title": "Home"})
        site.page("about", "about", {"title": "About"})
        site.page_plain("hello", "<p>Hello</p>")
        site.not_found("errors/not_found")
        site.style("styles/main.scss")
        site.asset("public", "public")

    """

    __slots__ = ("_assets", "_globals", "_routes", "_styles")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._styles: list[StyleEntry] = []
        self._assets: list[AssetEntry] = []
        self._globals: dict[str, JSONValue] = {}

    def page(
        self,
        path: RoutePath,
        template: str,
        data: Mapping[str, JSONValue] | None = None,
    ) -> Site:
        """Register a page at *path* rendered from *template* with *data*."""
        self._routes.append(Route(path=path, template_id=template, data=data or {}))
        return self

    def index(self, template: str, data: Mapping[str, JSONValue] | None = None) -> Site:
        """Register the site index (``index.html``)."""
        return self.page("/", template, data)

    def not_found(self, template: str, data: Mapping[str, JSONValue] | None = None) -> Site:
        """Register the not-found page (``404.html``)."""
        return self.page(NOT_FOUND_FILE, template, data)

    def page_plain(self, path: RoutePath, content: str) -> Site:
        """Register a page at *path* written from *content* with no template."""
        if not isinstance(content, str):
            msg = f"Plain page content must be a string, got {type(content).__name__}"
            raise ConfigError(msg)
        self._routes.append(Route(path=path, template_id="", content=content))
        return self

    def style(self, source: str | Path, output: str | None = None) -> Site:
        """Register a style sheet; output defaults to ``styles/<stem>.css``."""
        source = Path(source)
        self._styles.append(
            StyleEntry(source=source, output=output or f"styles/{source.stem}.css"),
        )
        return self

    def asset(self, source: str | Path, destination: str) -> Site:
        """Register a static file or directory to copy to *destination*."""
        self._assets.append(AssetEntry(source=Path(source), destination=destination))
        return self

    def set_globals(self, data: Mapping[str, JSONValue]) -> Site:
        """Replace the global render context shared by every route."""
        if not isinstance(data, Mapping):
            msg = f"Global data must be a mapping, got {type(data).__name__}"
            raise ConfigError(msg)
        self._globals = dict(data)
        return self

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def styles(self) -> tuple[StyleEntry, ...]:
        return tuple(self._styles)

    @property
    def assets(self) -> tuple[AssetEntry, ...]:
        return tuple(self._assets)

    @property
    def global_data(self) -> Mapping[str, JSONValue]:
        return MappingProxyType(self._globals)

    def context(self, config: KneadConfig, *, dev: bool = False) -> BuildContext:
        """Freeze this definition into a BuildContext."""
        return BuildContext(
            config=config,
            routes=self.routes,
            styles=self.styles,
            assets=self.assets,
            global_data=self._globals,
            dev=dev,
        )
