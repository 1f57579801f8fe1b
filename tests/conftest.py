"""Shared test fixtures for knead."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from knead.config import KneadConfig

# PNG signature followed by every byte value; must survive copying untouched
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256))

SITE_YAML = """\
minify: false
globals: data/site.json
routes:
  - path: /
    template: index
    data: {title: Home}
  - path: /about
    template: about
    data: {title: About Us}
  - path: 404.html
    template: not_found
"""

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
<h1>{{ site_name }}</h1>
</body>
</html>
"""


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site on disk.

    Layout::

        knead.yaml            three routes (/, /about, 404.html)
        data/site.json        {"site_name": "Knead Test"}
        templates/            index, about, not_found
        styles/main.scss      imports the _vars partial
        public/               logo.png, robots.txt

    """
    (tmp_path / "knead.yaml").write_text(SITE_YAML)

    data = tmp_path / "data"
    data.mkdir()
    (data / "site.json").write_text(json.dumps({"site_name": "Knead Test"}))

    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "index.html").write_text(PAGE_TEMPLATE)
    (templates / "about.html").write_text(PAGE_TEMPLATE)
    (templates / "not_found.html").write_text(
        "<!DOCTYPE html>\n<html>\n<body><p>Lost in {{ site_name }}</p></body>\n</html>\n"
    )

    styles = tmp_path / "styles"
    styles.mkdir()
    (styles / "_vars.scss").write_text("$accent: #ff0000;\n")
    (styles / "main.scss").write_text(
        '@import "vars";\n\nbody {\n  color: $accent;\n}\n'
    )

    public = tmp_path / "public"
    public.mkdir()
    (public / "logo.png").write_bytes(PNG_BYTES)
    (public / "robots.txt").write_text("User-agent: *\n")

    return tmp_path


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for a KneadConfig rooted at ``tmp_path`` (minify off by default)."""

    def _make(root: Path | None = None, **kwargs: object) -> KneadConfig:
        kwargs.setdefault("minify", False)
        return KneadConfig(root=root or tmp_path, **kwargs)

    return _make


@pytest.fixture
def write_templates():
    """Write ``name=source`` pairs as ``templates/<name>.html`` under a root."""

    def _write(root: Path, **templates: str) -> Path:
        directory = root / "templates"
        directory.mkdir(parents=True, exist_ok=True)
        for name, source in templates.items():
            (directory / f"{name}.html").write_text(source)
        return directory

    return _write
