"""knead — a static site builder for templates, JSON data and style sheets.

Declare routes that pair a template with render data, add style sheets and
static assets, then build everything into a deployable directory or serve
it from a dev server that rebuilds on every request.

Quick start::

    import knead

    knead.build("my-site/")       # Write build/ (minified)
    knead.dev("my-site/")         # http://127.0.0.1:8080, rebuilt per request

Programmatic sites::

    from knead import BuildOrchestrator, KneadConfig, Site

    site = Site().index("home", {"title": "Home"}).page("about", "about")
    report = BuildOrchestrator().run(site.context(KneadConfig(root=root)))

Built on:

    chirp       Web framework     (dev server)
    pounce      ASGI server       (serves the dev app)
    kida        Template engine   (renders HTML)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "BuildOrchestrator",
    "KneadConfig",
    "Site",
    "__version__",
    "build",
    "dev",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import knead`` fast; the template engine and web stack are only
    imported when a build or the dev server actually runs.
    """
    if name == "KneadConfig":
        from knead.config import KneadConfig

        return KneadConfig

    if name == "Site":
        from knead.site import Site

        return Site

    if name == "BuildOrchestrator":
        from knead.export.static import BuildOrchestrator

        return BuildOrchestrator

    if name == "build":
        from knead.app import build

        return build

    if name == "dev":
        from knead.app import dev

        return dev

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
