"""Asset handling — copy static files and directories into the output.

Every file is copied byte-for-byte, hidden files included, preserving the
directory structure below each asset entry's source.
"""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

from knead._errors import ConfigError, WriteError
from knead.export.static import ExportedFile

if TYPE_CHECKING:
    from collections.abc import Iterable

    from knead.site import AssetEntry, BuildContext


def copy_tree(src: Path, dst: Path) -> list[tuple[Path, Path]]:
    """Recursively copy *src* to *dst*.

    *src* may be a single file, in which case *dst* is the target file.
    Existing files under *dst* are overwritten; other files are left alone.

    Returns:
        ``(source, destination)`` pairs in sorted source order.

    Raises:
        WriteError: If the source is missing or a file cannot be copied.

    """
    if src.is_file():
        _copy_file(src, dst)
        return [(src, dst)]
    if not src.is_dir():
        raise WriteError(src, "Asset source does not exist")

    copied: list[tuple[Path, Path]] = []
    for src_file in sorted(src.rglob("*")):
        if not src_file.is_file():
            continue
        dest_file = dst / src_file.relative_to(src)
        _copy_file(src_file, dest_file)
        copied.append((src_file, dest_file))
    return copied


def _copy_file(src: Path, dst: Path) -> None:
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
    except OSError as exc:
        raise WriteError(dst, exc.strerror or str(exc)) from exc


def copy_assets(
    entries: Iterable[AssetEntry],
    output_dir: Path,
) -> tuple[tuple[ExportedFile, ...], tuple[WriteError, ...]]:
    """Copy each asset entry to ``output_dir / entry.destination``.

    A failing entry does not stop the others.

    Returns:
        Exported file records and the errors met along the way.

    """
    results: list[ExportedFile] = []
    errors: list[WriteError] = []

    for entry in entries:
        t0 = time.perf_counter()
        try:
            pairs = copy_tree(entry.source, output_dir / entry.destination)
        except WriteError as exc:
            errors.append(exc)
            continue
        elapsed = (time.perf_counter() - t0) * 1000
        per_file = elapsed / len(pairs) if pairs else 0.0

        for src_file, dest_file in pairs:
            results.append(ExportedFile(
                source_path=str(src_file),
                output_path=dest_file,
                source_type="asset",
                size_bytes=dest_file.stat().st_size,
                duration_ms=per_file,
            ))

    return tuple(results), tuple(errors)


def check_clean_target(output_dir: Path, context: BuildContext) -> None:
    """Refuse to clean an output directory that overlaps the site's sources.

    The site root and its ancestors are never cleaned, nor is a directory
    that holds or sits inside a source directory, style sheet or asset.

    Raises:
        ConfigError: Naming the source the clean would delete.

    """
    config = context.config
    target = output_dir.resolve()
    if config.root.resolve().is_relative_to(target):
        msg = f"Refusing to clean output directory {output_dir}: it contains the site root"
        raise ConfigError(msg)

    sources = [config.templates_path, config.styles_path, config.public_path]
    sources.extend(style.source for style in context.styles)
    sources.extend(entry.source for entry in context.assets)
    for source in sources:
        resolved = source.resolve()
        if resolved.is_relative_to(target) or (
            resolved.is_dir() and target.is_relative_to(resolved)
        ):
            msg = (
                f"Refusing to clean output directory {output_dir}: "
                f"it overlaps site source {source}"
            )
            raise ConfigError(msg)


def clean_output(output_dir: Path) -> None:
    """Remove and recreate the output directory."""
    try:
        if output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(output_dir, exc.strerror or str(exc)) from exc
