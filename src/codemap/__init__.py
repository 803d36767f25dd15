"""Codebase symbol map: models, aggregation and rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codemap.models import FileSymbols, ProjectMap, ProjectStatistics, Symbol

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from parse.registry import ExtractorRegistry
    from rules.config import CodeMapConfig


def build_project_map(
    root_dir: str | Path,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
    max_files: int | None = None,
    *,
    config: CodeMapConfig | None = None,
    registry: ExtractorRegistry | None = None,
) -> ProjectMap:
    """Build a project map; see :func:`codemap.aggregate.build_project_map`.

    The aggregate module is imported on call: ``parse.patterns`` imports
    ``codemap.models``, so importing ``parse`` first would otherwise reach
    ``parse.registry`` while ``parse.patterns`` is still initializing.
    """
    from codemap.aggregate import build_project_map as _build_project_map

    return _build_project_map(
        root_dir,
        include_patterns,
        exclude_patterns,
        max_files,
        config=config,
        registry=registry,
    )


__all__ = [
    "FileSymbols",
    "ProjectMap",
    "ProjectStatistics",
    "Symbol",
    "build_project_map",
]
