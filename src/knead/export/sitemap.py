"""Sitemap generation — produce sitemap.xml from written pages.

Generates a standard sitemap.xml listing every written page.  Requires
``base_url`` to be configured.  ``lastmod`` is omitted so that rebuilding
an unchanged site yields a byte-identical file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, tostring

from knead.site import NOT_FOUND_FILE

if TYPE_CHECKING:
    from collections.abc import Iterable

    from knead.site import Route

SITEMAP_FILE = "sitemap.xml"

# XML namespace for sitemaps
_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def generate_sitemap(routes: Iterable[Route], base_url: str) -> str:
    """Generate a sitemap.xml string for *routes*.

    The not-found page is never listed.

    Args:
        routes: Routes whose pages were written, in declaration order.
        base_url: Site base URL (e.g., ``"https://example.com"``).

    Returns:
        Complete XML string suitable for writing to ``sitemap.xml``.

    """
    base = base_url.rstrip("/")

    urlset = Element("urlset")
    urlset.set("xmlns", _SITEMAP_NS)

    for route in routes:
        if route.output_path == NOT_FOUND_FILE:
            continue
        url_el = SubElement(urlset, "url")
        loc = SubElement(url_el, "loc")
        loc.text = base + route.url

    xml = tostring(urlset, encoding="unicode", xml_declaration=False)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"
