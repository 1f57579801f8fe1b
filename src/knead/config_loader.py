"""Load KneadConfig and the site definition from knead.yaml / knead.toml.

Merges file config with CLI kwargs.  CLI overrides file.  The same file
declares the site: ``globals``, ``routes``, ``styles`` and ``assets``::

    output: build
    minify: true
    globals: data/site.json        # or an inline mapping
    routes:
      - path: /
        template: index
        data: {title: Home}
      - path: /about
        template: about
        data: data/about.json
      - path: 404.html
        template: errors/not_found
      - path: hello
        content: "<p>Hello</p>"   # written as-is, no template
    styles:                        # optional; default: every sheet in styles/
      - source: styles/main.scss
        output: css/main.css
    assets:                        # optional; default: public/ -> public/
      - source: public
        destination: public

"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from knead._errors import ConfigError
from knead.config import KneadConfig
from knead.site import Site

if TYPE_CHECKING:
    from knead._types import JSONValue

SITE_FILES = ("knead.yaml", "knead.yml", "knead.toml")

_STYLE_SUFFIXES = (".scss", ".sass", ".css")

_CONFIG_KEYS = frozenset({
    "templates_dir", "styles_dir", "public_dir", "output", "template_ext",
    "minify", "clean", "host", "port", "base_url", "sitemap", "dev_warning",
    "workers",
})

_SITE_KEYS = frozenset({"globals", "routes", "styles", "assets"})


def load_config(root: Path, **overrides: object) -> KneadConfig:
    """Load KneadConfig from root, optionally merging the site file.

    Overrides whose value is None are ignored so CLI defaults do not mask
    file settings.

    Raises:
        ConfigError: If the site file is malformed or names unknown keys.

    """
    file_config = {
        k: v for k, v in read_site_file(root).items() if k not in _SITE_KEYS
    }
    unknown = sorted(set(file_config) - _CONFIG_KEYS)
    if unknown:
        msg = f"Unknown configuration keys in site file: {', '.join(unknown)}"
        raise ConfigError(msg)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    # Normalize output to Path
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    try:
        return KneadConfig(root=Path(root), **merged)
    except TypeError as exc:
        msg = f"Invalid configuration: {exc}"
        raise ConfigError(msg) from exc


def read_site_file(root: Path) -> dict[str, object]:
    """Read knead.yaml/knead.yml/knead.toml from root.  Empty dict if absent."""
    for name in SITE_FILES:
        path = Path(root) / name
        if path.is_file():
            return _parse_toml(path) if path.suffix == ".toml" else _parse_yaml(path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_knead_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_knead_section(data)


def _flatten_knead_section(data: dict[str, object]) -> dict[str, object]:
    """Hoist a ``[knead]`` table into top-level keys."""
    result: dict[str, object] = {k: v for k, v in data.items() if k != "knead"}
    knead = data.get("knead")
    if isinstance(knead, dict):
        result.update(knead)
    return result


# ---------------------------------------------------------------------------
# Site definition
# ---------------------------------------------------------------------------


def load_site(config: KneadConfig) -> Site:
    """Build the Site declared in the site file under ``config.root``.

    Re-reads every file on each call; the dev server relies on this to pick
    up edits without a restart.

    Raises:
        ConfigError: If the definition is malformed or a data file is unreadable.

    """
    raw = read_site_file(config.root)
    site = Site()

    if "globals" in raw:
        site.set_globals(_load_data(raw["globals"], config.root, "globals"))

    routes = raw.get("routes") or []
    if not isinstance(routes, list):
        msg = "'routes' must be a list"
        raise ConfigError(msg)
    for i, entry in enumerate(routes):
        if not isinstance(entry, dict) or "path" not in entry:
            msg = f"routes[{i}] must be a mapping with 'path' and 'template'"
            raise ConfigError(msg)
        if "content" in entry:
            if "template" in entry or "data" in entry:
                msg = f"routes[{i}] with 'content' takes no 'template' or 'data'"
                raise ConfigError(msg)
            site.page_plain(str(entry["path"]), entry["content"])
            continue
        if "template" not in entry:
            msg = f"routes[{i}] must be a mapping with 'path' and 'template'"
            raise ConfigError(msg)
        data = _load_data(entry.get("data", {}), config.root, f"routes[{i}].data")
        site.page(str(entry["path"]), str(entry["template"]), data)

    if "styles" in raw:
        for i, entry in enumerate(_entry_list(raw["styles"], "styles")):
            if "source" not in entry:
                msg = f"styles[{i}] must name a 'source'"
                raise ConfigError(msg)
            site.style(config.root / str(entry["source"]), entry.get("output"))
    else:
        for source, output in discover_styles(config.styles_path, config.styles_dir):
            site.style(source, output)

    if "assets" in raw:
        for i, entry in enumerate(_entry_list(raw["assets"], "assets")):
            if "source" not in entry or "destination" not in entry:
                msg = f"assets[{i}] must name a 'source' and a 'destination'"
                raise ConfigError(msg)
            site.asset(config.root / str(entry["source"]), str(entry["destination"]))
    elif config.public_path.is_dir():
        site.asset(config.public_path, config.public_dir)

    return site


def discover_styles(styles_path: Path, prefix: str) -> list[tuple[Path, str]]:
    """List every non-partial style sheet under *styles_path*.

    Partials (names starting with ``_``) are only reachable through imports.
    Output keeps the relative directory: ``styles/a/b.scss`` -> ``styles/a/b.css``.

    """
    if not styles_path.is_dir():
        return []
    found: list[tuple[Path, str]] = []
    for source in sorted(styles_path.rglob("*")):
        if not source.is_file() or source.suffix not in _STYLE_SUFFIXES:
            continue
        if source.name.startswith("_"):
            continue
        relative = source.relative_to(styles_path).with_suffix(".css")
        found.append((source, f"{prefix}/{relative.as_posix()}"))
    return found


def _entry_list(value: object, key: str) -> list[dict[str, object]]:
    if not isinstance(value, list) or not all(isinstance(e, dict) for e in value):
        msg = f"'{key}' must be a list of mappings"
        raise ConfigError(msg)
    return value


def _load_data(value: object, root: Path, where: str) -> Mapping[str, JSONValue]:
    """Resolve inline render data or a path to a JSON/YAML data file."""
    if isinstance(value, str):
        path = root / value
        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            msg = f"Failed to load {where} from {path}: {exc}"
            raise ConfigError(msg) from exc
        value = data if data is not None else {}
    if not isinstance(value, dict):
        msg = f"{where} must be a mapping, got {type(value).__name__}"
        raise ConfigError(msg)
    return value
