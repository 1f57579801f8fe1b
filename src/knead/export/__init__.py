"""Export layer — build orchestration and output generation.

Renders routes and style sheets, writes them (minified) under the output
root, copies assets and reports every failure in one ``BuildReport``.
"""

from knead.export.static import BuildOrchestrator, BuildReport, ExportedFile

__all__ = ["BuildOrchestrator", "BuildReport", "ExportedFile"]
