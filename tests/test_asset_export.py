"""Tests for knead.export.assets — asset copying and output cleaning."""

from __future__ import annotations

from pathlib import Path

import pytest

from knead._errors import WriteError
from knead.export.assets import clean_output, copy_assets, copy_tree
from knead.site import AssetEntry


# ---------------------------------------------------------------------------
# copy_tree
# ---------------------------------------------------------------------------


class TestCopyTree:
    """copy_tree — recursive, byte-exact copy."""

    def test_preserves_directory_structure(self, tmp_path: Path) -> None:
        src = tmp_path / "public"
        (src / "img").mkdir(parents=True)
        (src / "img" / "a.png").write_bytes(b"\x00\x01\xff")
        (src / "robots.txt").write_text("User-agent: *\n")

        pairs = copy_tree(src, tmp_path / "out")

        assert (tmp_path / "out" / "img" / "a.png").read_bytes() == b"\x00\x01\xff"
        assert (tmp_path / "out" / "robots.txt").exists()
        assert [s.name for s, _ in pairs] == ["a.png", "robots.txt"]

    def test_hidden_files_copied(self, tmp_path: Path) -> None:
        src = tmp_path / "public"
        src.mkdir()
        (src / ".well-known").mkdir()
        (src / ".well-known" / "security.txt").write_text("contact")
        copy_tree(src, tmp_path / "out")
        assert (tmp_path / "out" / ".well-known" / "security.txt").exists()

    def test_single_file(self, tmp_path: Path) -> None:
        src = tmp_path / "favicon.ico"
        src.write_bytes(b"ico")
        pairs = copy_tree(src, tmp_path / "out" / "favicon.ico")
        assert pairs == [(src, tmp_path / "out" / "favicon.ico")]
        assert (tmp_path / "out" / "favicon.ico").read_bytes() == b"ico"

    def test_overwrites_without_deleting_others(self, tmp_path: Path) -> None:
        src = tmp_path / "public"
        src.mkdir()
        (src / "a.txt").write_text("new")
        out = tmp_path / "out"
        out.mkdir()
        (out / "a.txt").write_text("old")
        (out / "keep.txt").write_text("keep")

        copy_tree(src, out)

        assert (out / "a.txt").read_text() == "new"
        assert (out / "keep.txt").read_text() == "keep"

    def test_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(WriteError, match="does not exist"):
            copy_tree(tmp_path / "nope", tmp_path / "out")


# ---------------------------------------------------------------------------
# copy_assets
# ---------------------------------------------------------------------------


class TestCopyAssets:
    """copy_assets — every entry copied, failures collected."""

    def test_records(self, tmp_path: Path) -> None:
        src = tmp_path / "public"
        src.mkdir()
        (src / "logo.png").write_bytes(b"png")
        output = tmp_path / "build"

        files, errors = copy_assets([AssetEntry(src, "static")], output)

        assert errors == ()
        assert len(files) == 1
        assert files[0].source_type == "asset"
        assert files[0].output_path == output / "static" / "logo.png"
        assert files[0].size_bytes == 3

    def test_failing_entry_does_not_stop_others(self, tmp_path: Path) -> None:
        good = tmp_path / "good"
        good.mkdir()
        (good / "a.txt").write_text("a")
        output = tmp_path / "build"

        files, errors = copy_assets(
            [AssetEntry(tmp_path / "missing", "m"), AssetEntry(good, "g")], output,
        )

        assert len(errors) == 1
        assert errors[0].path == tmp_path / "missing"
        assert [f.output_path for f in files] == [output / "g" / "a.txt"]

    def test_empty_source_dir(self, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()
        files, errors = copy_assets([AssetEntry(tmp_path / "empty", "e")], tmp_path / "b")
        assert files == ()
        assert errors == ()


# ---------------------------------------------------------------------------
# clean_output
# ---------------------------------------------------------------------------


class TestCleanOutput:
    """clean_output — output directory emptied and recreated."""

    def test_removes_existing(self, tmp_path: Path) -> None:
        out = tmp_path / "build"
        (out / "old").mkdir(parents=True)
        (out / "old" / "stale.html").write_text("x")
        clean_output(out)
        assert out.is_dir()
        assert list(out.iterdir()) == []

    def test_creates_missing(self, tmp_path: Path) -> None:
        out = tmp_path / "build"
        clean_output(out)
        assert out.is_dir()
