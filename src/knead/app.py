"""knead entry points — production build and dev server.

The two public functions (build, dev) load the configuration and the site
definition, print the banner, and hand off to the orchestrator or the dev
server.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

from knead.config_loader import load_config, load_site

if TYPE_CHECKING:
    from knead.export.static import BuildReport
    from knead.site import Site


def _site_warnings(site: Site) -> list[str]:
    """Warnings about the site definition shown under the banner."""
    warnings: list[str] = []
    if not site.routes:
        warnings.append("No routes declared; nothing will be rendered")
    warnings.extend(
        f"Asset source {entry.source} does not exist"
        for entry in site.assets
        if not entry.source.exists()
    )
    return warnings


def build(root: str | Path = ".", **kwargs: object) -> BuildReport:
    """Build the site into the output directory.

    Renders every route, compiles every style sheet, writes them (minified
    unless disabled), copies assets and prints the full report.

    Args:
        root: Path to the site root directory.
        **kwargs: Override KneadConfig fields.

    Returns:
        The BuildReport; ``report.ok`` is False if anything failed.

    Raises:
        ConfigError: If the configuration or route table is invalid.

    """
    from knead.banner import print_banner, print_report
    from knead.export.static import BuildOrchestrator
    from knead.observability import BuildCollector, EventLog

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    site = load_site(config)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(
        config, len(site.routes), mode="build",
        style_count=len(site.styles),
        asset_count=len(site.assets),
        load_ms=load_ms,
        warnings=_site_warnings(site),
    )

    collector = BuildCollector(EventLog())
    report = BuildOrchestrator(collector).run(site.context(config))
    print_report(report, collector.log)
    return report


def dev(root: str | Path = ".", **kwargs: object) -> None:
    """Start the development server.

    Serves every declared route at ``http://host:port``, rebuilding the
    requested page or style sheet on each request.  Blocks until interrupted.

    Args:
        root: Path to the site root directory.
        **kwargs: Override KneadConfig fields.

    Raises:
        ConfigError: If the configuration or route table is invalid at startup.
        PortInUseError: If the port is already bound.

    """
    from knead.banner import print_banner
    from knead.dev.server import DevServer, ensure_port_available
    from knead.observability import BuildCollector, EventLog

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    site = load_site(config)
    load_ms = (time.perf_counter() - t0) * 1000
    ensure_port_available(config.host, config.port)

    # Pass the collector as pounce's lifecycle_collector so connection
    # events flow into the same EventLog as build events.
    collector = BuildCollector(EventLog())
    server = DevServer(config, overrides=kwargs, collector=collector)

    print_banner(
        config, len(site.routes), mode="dev",
        style_count=len(site.styles),
        asset_count=len(site.assets),
        load_ms=load_ms,
        warnings=_site_warnings(site),
    )
    server.run()
