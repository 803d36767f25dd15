"""Renderers for the codebase map: JSON, markdown outlines and a summary."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, Any

import orjson

from codemap.models import ProjectMap

if TYPE_CHECKING:
    from codemap.models import FileSymbols, Symbol

SUMMARY_SYMBOL_LIMIT = 50
TRUNCATION_MARKER = "  ... (truncated)"

FORMAT_JSON = "json"
FORMAT_SUMMARY = "summary"
FORMAT_MARKDOWN = "markdown"
FORMATS = (FORMAT_JSON, FORMAT_MARKDOWN, "md", FORMAT_SUMMARY)


def _symbol_payload(symbol: Symbol) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": symbol.name, "kind": symbol.kind}
    if symbol.signature:
        payload["signature"] = symbol.signature
    payload["start_line"] = symbol.start_line
    payload["end_line"] = symbol.end_line
    if symbol.children:
        payload["children"] = [_symbol_payload(child) for child in symbol.children]
    return payload


def to_payload(project_map: ProjectMap) -> dict[str, Any]:
    """Plain-dict form of the map with the published field names."""
    return {
        "root_path": project_map.root_path,
        "languages": list(project_map.languages),
        "files": [
            {
                "path": f.path,
                "language": f.language,
                "symbols": [_symbol_payload(s) for s in f.symbols],
                "line_count": f.line_count,
            }
            for f in project_map.files
        ],
        "statistics": project_map.statistics.model_dump(),
    }


def format_json(project_map: ProjectMap) -> str:
    return orjson.dumps(to_payload(project_map), option=orjson.OPT_INDENT_2).decode()


def parse_json(text: str | bytes) -> ProjectMap:
    """Load a map previously rendered with :func:`format_json`."""
    return ProjectMap.model_validate(orjson.loads(text))


def _project_name(project_map: ProjectMap) -> str:
    return posixpath.basename(project_map.root_path.replace("\\", "/").rstrip("/"))


def _group_by_directory(project_map: ProjectMap) -> list[tuple[str, list[FileSymbols]]]:
    groups: dict[str, list[FileSymbols]] = {}
    for file_symbols in project_map.files:
        directory = posixpath.dirname(file_symbols.path) or "/"
        groups.setdefault(directory, []).append(file_symbols)
    return sorted(groups.items())


def _symbol_label(symbol: Symbol) -> str:
    if symbol.signature:
        return symbol.signature
    return f"{symbol.kind} {symbol.name}"


def _outline(project_map: ProjectMap, *, show_children: bool) -> str:
    stats = project_map.statistics
    title = f"# Project: {_project_name(project_map)}"
    if not show_children:
        title += " (Compact)"
    lines = [
        title,
        "",
        f"**Languages**: {', '.join(project_map.languages)}",
        f"**Files**: {stats.total_files} | **Lines**: {stats.total_lines}"
        f" | **Symbols**: {stats.total_symbols}",
        "",
        "---",
        "",
    ]

    for directory, files in _group_by_directory(project_map):
        lines.extend([f"## {directory}", ""])
        for file_symbols in files:
            if not file_symbols.symbols:
                continue
            name = posixpath.basename(file_symbols.path)
            lines.extend([f"### {name} ({file_symbols.line_count} lines)", ""])
            for symbol in file_symbols.symbols:
                lines.append(f"- `{_symbol_label(symbol)}` :{symbol.start_line}")
                if show_children:
                    lines.extend(
                        f"  - `{child.name}` :{child.start_line}"
                        for child in symbol.children
                    )
            lines.append("")

    return "\n".join(lines) + "\n"


def format_markdown(project_map: ProjectMap) -> str:
    """Full outline grouped by directory, child symbols included."""
    return _outline(project_map, show_children=True)


def format_compact_markdown(project_map: ProjectMap) -> str:
    """Outline grouped by directory without child symbols."""
    return _outline(project_map, show_children=False)


def format_summary(
    project_map: ProjectMap, limit: int = SUMMARY_SYMBOL_LIMIT
) -> str:
    """Short digest: counts, kind histogram and the first ``limit`` symbols."""
    stats = project_map.statistics
    lines = [
        f"Project: {_project_name(project_map)}",
        f"Languages: {', '.join(project_map.languages)}",
        f"Files: {stats.total_files}, Lines: {stats.total_lines},"
        f" Symbols: {stats.total_symbols}",
        "",
        "Symbol breakdown:",
    ]
    lines.extend(
        f"  {kind}: {stats.by_symbol_kind[kind]}" for kind in sorted(stats.by_symbol_kind)
    )
    lines.extend(["", "Key symbols:"])

    listed = 0
    for file_symbols in project_map.files:
        name = posixpath.basename(file_symbols.path)
        for symbol in file_symbols.symbols:
            if listed >= limit:
                lines.append(TRUNCATION_MARKER)
                return "\n".join(lines) + "\n"
            lines.append(f"  {name}.{symbol.name} ({symbol.kind})")
            listed += 1

    return "\n".join(lines) + "\n"


def render(project_map: ProjectMap, fmt: str = FORMAT_MARKDOWN, *, compact: bool = False) -> str:
    """Render ``project_map`` in the format named by ``fmt``.

    The selector is case-insensitive; ``compact`` only applies to the
    markdown forms and unknown selectors fall back to the full markdown
    outline.
    """
    selector = fmt.strip().lower()
    if selector == FORMAT_JSON:
        return format_json(project_map)
    if selector == FORMAT_SUMMARY:
        return format_summary(project_map)
    if selector in (FORMAT_MARKDOWN, "md") and compact:
        return format_compact_markdown(project_map)
    return format_markdown(project_map)


__all__ = [
    "FORMATS",
    "SUMMARY_SYMBOL_LIMIT",
    "TRUNCATION_MARKER",
    "format_compact_markdown",
    "format_json",
    "format_markdown",
    "format_summary",
    "parse_json",
    "render",
    "to_payload",
]
