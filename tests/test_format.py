from __future__ import annotations

import orjson
import pytest

from codemap.aggregate import compute_statistics
from codemap.format import (
    SUMMARY_SYMBOL_LIMIT,
    TRUNCATION_MARKER,
    format_compact_markdown,
    format_json,
    format_markdown,
    format_summary,
    parse_json,
    render,
)
from codemap.models import FileSymbols, ProjectMap, Symbol


def _project_map(files: list[FileSymbols], root_path: str = "/work/demo") -> ProjectMap:
    return ProjectMap(
        root_path=root_path,
        languages=sorted({f.language for f in files}),
        files=files,
        statistics=compute_statistics(files),
    )


@pytest.fixture
def sample_map() -> ProjectMap:
    store = Symbol(
        name="Store",
        kind="interface",
        signature="interface Store",
        start_line=5,
        end_line=8,
        children=[
            Symbol(name="Get", kind="method", start_line=6, end_line=6),
            Symbol(name="Put", kind="method", start_line=7, end_line=7),
        ],
    )
    files = [
        FileSymbols(
            path="main.go",
            language="go",
            symbols=[
                Symbol(
                    name="main",
                    kind="function",
                    signature="main()",
                    start_line=3,
                    end_line=5,
                )
            ],
            line_count=6,
        ),
        FileSymbols(path="pkg/store/store.go", language="go", symbols=[store], line_count=9),
        FileSymbols(
            path="web/app.ts",
            language="typescript",
            symbols=[Symbol(name="App", kind="class", start_line=2, end_line=2)],
            line_count=4,
        ),
        FileSymbols(path="web/empty.ts", language="typescript", symbols=[], line_count=1),
    ]
    return _project_map(files)


def test_json_uses_published_field_names(sample_map: ProjectMap) -> None:
    payload = orjson.loads(format_json(sample_map))

    assert list(payload) == ["root_path", "languages", "files", "statistics"]
    assert payload["languages"] == ["go", "typescript"]
    assert payload["statistics"] == {
        "total_files": 4,
        "total_lines": 20,
        "total_symbols": 5,
        "by_language": {"go": 2, "typescript": 2},
        "by_symbol_kind": {"class": 1, "function": 1, "interface": 1, "method": 2},
    }
    assert "partial" not in payload


def test_json_omits_empty_signature_and_children(sample_map: ProjectMap) -> None:
    payload = orjson.loads(format_json(sample_map))
    files = {f["path"]: f for f in payload["files"]}

    app = files["web/app.ts"]["symbols"][0]
    assert app == {"name": "App", "kind": "class", "start_line": 2, "end_line": 2}

    main = files["main.go"]["symbols"][0]
    assert main["signature"] == "main()"
    assert "children" not in main

    store = files["pkg/store/store.go"]["symbols"][0]
    assert [child["name"] for child in store["children"]] == ["Get", "Put"]
    assert files["web/empty.ts"]["symbols"] == []


def test_json_is_two_space_indented(sample_map: ProjectMap) -> None:
    text = format_json(sample_map)

    assert text.startswith('{\n  "root_path": "/work/demo",\n')


def test_json_round_trip(sample_map: ProjectMap) -> None:
    assert parse_json(format_json(sample_map)).model_dump() == sample_map.model_dump()


def test_empty_map_json_has_empty_lists() -> None:
    payload = orjson.loads(format_json(_project_map([])))

    assert payload["languages"] == []
    assert payload["files"] == []
    assert payload["statistics"]["total_files"] == 0


def test_markdown_groups_by_directory(sample_map: ProjectMap) -> None:
    text = format_markdown(sample_map)
    lines = text.splitlines()

    assert lines[0] == "# Project: demo"
    assert "**Languages**: go, typescript" in lines
    assert "**Files**: 4 | **Lines**: 20 | **Symbols**: 5" in lines
    headings = [line for line in lines if line.startswith("## ")]
    assert headings == ["## /", "## pkg/store", "## web"]
    assert "### main.go (6 lines)" in lines
    assert "- `main()` :3" in lines
    assert "- `class App` :2" in lines
    assert "  - `Get` :6" in lines
    assert "  - `Put` :7" in lines


def test_markdown_skips_files_without_symbols(sample_map: ProjectMap) -> None:
    assert "empty.ts" not in format_markdown(sample_map)


def test_compact_markdown_hides_children(sample_map: ProjectMap) -> None:
    full = format_markdown(sample_map)
    compact = format_compact_markdown(sample_map)

    full_lines = full.splitlines()
    compact_lines = compact.splitlines()

    assert full_lines[0] == "# Project: demo"
    assert compact_lines[0] == "# Project: demo (Compact)"
    assert "- `interface Store` :5" in compact_lines
    assert "`Get`" not in compact
    assert [line for line in full_lines[1:] if not line.startswith("  - ")] == (
        compact_lines[1:]
    )


def _many_symbols_map(count: int) -> ProjectMap:
    symbols = [
        Symbol(name=f"fn{index}", kind="function", start_line=index + 1, end_line=index + 1)
        for index in range(count)
    ]
    files = [FileSymbols(path="src/big.py", language="python", symbols=symbols, line_count=count)]
    return _project_map(files)


def test_summary_header_and_breakdown(sample_map: ProjectMap) -> None:
    lines = format_summary(sample_map).splitlines()

    assert lines[:11] == [
        "Project: demo",
        "Languages: go, typescript",
        "Files: 4, Lines: 20, Symbols: 5",
        "",
        "Symbol breakdown:",
        "  class: 1",
        "  function: 1",
        "  interface: 1",
        "  method: 2",
        "",
        "Key symbols:",
    ]
    assert lines[11:] == [
        "  main.go.main (function)",
        "  store.go.Store (interface)",
        "  app.ts.App (class)",
    ]


def test_summary_truncates_after_limit() -> None:
    lines = format_summary(_many_symbols_map(60)).splitlines()
    listed = lines[lines.index("Key symbols:") + 1 :]

    assert len(listed) == SUMMARY_SYMBOL_LIMIT + 1
    assert listed[0] == "  big.py.fn0 (function)"
    assert listed[SUMMARY_SYMBOL_LIMIT - 1] == "  big.py.fn49 (function)"
    assert listed[-1] == TRUNCATION_MARKER


def test_summary_at_limit_has_no_marker() -> None:
    text = format_summary(_many_symbols_map(SUMMARY_SYMBOL_LIMIT))

    assert TRUNCATION_MARKER not in text


@pytest.mark.parametrize(
    ("fmt", "compact", "expected"),
    [
        ("json", False, format_json),
        ("JSON", False, format_json),
        ("summary", True, format_summary),
        ("markdown", False, format_markdown),
        ("md", True, format_compact_markdown),
        ("Markdown", True, format_compact_markdown),
        ("xml", False, format_markdown),
        ("xml", True, format_markdown),
    ],
)
def test_render_selectors(
    sample_map: ProjectMap, fmt: str, compact: bool, expected: object
) -> None:
    assert render(sample_map, fmt, compact=compact) == expected(sample_map)  # type: ignore[operator]
