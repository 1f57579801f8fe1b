"""Tests for knead.config — KneadConfig frozen dataclass."""

from __future__ import annotations

from pathlib import Path

import pytest

from knead.config import KneadConfig


class TestKneadConfigDefaults:
    """Default values match the documented behaviour."""

    def test_defaults(self) -> None:
        config = KneadConfig()
        assert config.templates_dir == "templates"
        assert config.styles_dir == "styles"
        assert config.public_dir == "public"
        assert config.output == Path("build")
        assert config.template_ext == ".html"
        assert config.minify is True
        assert config.clean is False
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.base_url == ""
        assert config.workers == 1

    def test_root_defaults_to_cwd(self) -> None:
        assert KneadConfig().root == Path.cwd()


class TestKneadConfigPaths:
    """Resolved path properties."""

    def test_relative_root_resolved(self) -> None:
        config = KneadConfig(root=Path("."))
        assert config.root.is_absolute()

    def test_directory_properties(self, tmp_path: Path) -> None:
        config = KneadConfig(root=tmp_path)
        assert config.templates_path == tmp_path / "templates"
        assert config.styles_path == tmp_path / "styles"
        assert config.public_path == tmp_path / "public"
        assert config.output_path == tmp_path / "build"

    def test_absolute_output_kept(self, tmp_path: Path) -> None:
        out = tmp_path / "elsewhere"
        config = KneadConfig(root=tmp_path / "site", output=out)
        assert config.output_path == out

    def test_dev_url(self) -> None:
        config = KneadConfig(host="0.0.0.0", port=9000)
        assert config.dev_url == "http://0.0.0.0:9000"


class TestKneadConfigFrozen:
    """Configuration cannot change after creation."""

    def test_frozen(self) -> None:
        config = KneadConfig()
        with pytest.raises(AttributeError):
            config.port = 1234  # type: ignore[misc]
