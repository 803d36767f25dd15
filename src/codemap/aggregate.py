"""Build a ProjectMap from the files of a walk."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING

from codemap.models import (
    FileSymbols,
    ProjectMap,
    ProjectStatistics,
    flatten_symbols,
)
from parse.base import ExtractionError
from parse.registry import default_registry
from rules.config import CodeMapConfig
from scan.files import walk_source_files

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parse.registry import ExtractorRegistry
    from scan.files import SourceFile

logger = logging.getLogger(__name__)


def read_source(path: Path) -> str:
    """Read a source file as UTF-8 text, rejecting binary content."""
    raw = path.read_bytes()
    if b"\x00" in raw:
        msg = "file looks binary (contains NUL bytes)"
        raise ExtractionError(msg)
    return raw.decode("utf-8")


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def extract_file(source: SourceFile, registry: ExtractorRegistry) -> FileSymbols:
    """Extract the outline of one file.

    Raises:
        OSError, ValueError, ExtractionError: the file cannot be mapped
            (ValueError covers UnicodeDecodeError).
    """
    content = read_source(source.path)
    symbols = registry.extract(content, source.language)
    return FileSymbols(
        path=source.relative_path,
        language=source.language,
        symbols=symbols,
        line_count=count_lines(content),
    )


def compute_statistics(files: Sequence[FileSymbols]) -> ProjectStatistics:
    """Fold per-file outlines into project statistics.

    Symbols are counted flat: children count towards ``total_symbols`` and
    ``by_symbol_kind`` exactly like top-level symbols, so the kind histogram
    always adds up to ``total_symbols``.
    """
    by_language: Counter[str] = Counter()
    by_kind: Counter[str] = Counter()
    total_lines = 0
    total_symbols = 0

    for file_symbols in files:
        by_language[file_symbols.language] += 1
        total_lines += file_symbols.line_count
        for symbol in flatten_symbols(file_symbols.symbols):
            by_kind[symbol.kind] += 1
            total_symbols += 1

    return ProjectStatistics(
        total_files=len(files),
        total_lines=total_lines,
        total_symbols=total_symbols,
        by_language={lang: by_language[lang] for lang in sorted(by_language)},
        by_symbol_kind={kind: by_kind[kind] for kind in sorted(by_kind)},
    )


def aggregate(
    root_path: str,
    sources: Sequence[SourceFile],
    *,
    registry: ExtractorRegistry | None = None,
    partial: bool = False,
) -> ProjectMap:
    """Extract every source file and assemble the project map.

    Files that cannot be read, decoded or parsed are left out of the map
    and do not count in the statistics.
    """
    if registry is None:
        registry = default_registry()

    files: list[FileSymbols] = []
    for source in sources:
        try:
            files.append(extract_file(source, registry))
        except (OSError, ValueError, ExtractionError) as exc:
            logger.warning("skipping %s: %s", source.relative_path, exc)

    return ProjectMap(
        root_path=root_path,
        languages=sorted({f.language for f in files}),
        files=files,
        statistics=compute_statistics(files),
        partial=partial,
    )


def build_project_map(
    root_dir: str | Path,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
    max_files: int | None = None,
    *,
    config: CodeMapConfig | None = None,
    registry: ExtractorRegistry | None = None,
) -> ProjectMap:
    """Scan ``root_dir`` and return its symbol map.

    Args:
        root_dir: Directory to scan
        include_patterns: Glob-or-substring include patterns
        exclude_patterns: Glob-or-substring exclude patterns
        max_files: Cap on mapped files; defaults to ``config.max_files``
        config: Optional configuration (ignore tables, defaults)
        registry: Optional extractor registry

    Returns:
        The ProjectMap; ``partial`` is set when the file cap was reached.

    Raises:
        ScanError: if ``root_dir`` cannot be opened.
    """
    if config is None:
        config = CodeMapConfig()
    if max_files is None:
        max_files = config.max_files

    root = Path(root_dir).expanduser().resolve()
    walk = walk_source_files(
        root,
        include_patterns,
        exclude_patterns,
        max_files,
        resolver=config.build_resolver(root),
    )

    return aggregate(str(root), walk.files, registry=registry, partial=walk.truncated)


__all__ = [
    "aggregate",
    "build_project_map",
    "compute_statistics",
    "count_lines",
    "extract_file",
    "read_source",
]
