"""Shared type definitions for knead."""

from typing import Literal

# Mode of operation
type KneadMode = Literal["dev", "build"]

# JSON-like render context value
type JSONValue = (
    str | int | float | bool | None | list[JSONValue] | dict[str, JSONValue]
)

# Render context handed to the template engine
type JSONMap = dict[str, JSONValue]

# Declared route path (e.g., "/", "about", "/docs/")
type RoutePath = str

# Output path relative to the build root (e.g., "docs/index.html")
type OutputPath = str

# Kind of rendered artifact
type ArtifactKind = Literal["page", "style"]
