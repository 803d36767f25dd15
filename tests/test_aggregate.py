from __future__ import annotations

import shutil
from pathlib import Path

import pytest

import codemap
from codemap.aggregate import aggregate, build_project_map, compute_statistics
from codemap.models import FileSymbols, ProjectMap, ProjectStatistics, Symbol
from parse.patterns import PythonExtractor
from parse.registry import ExtractorRegistry
from rules.config import CodeMapConfig, IgnoreConfig
from scan.files import ScanError, SourceFile

FIXTURE_REPO = Path(__file__).parent / "fixtures" / "mini_repo"


def _copy_mini_repo_fixture(root: Path) -> None:
    shutil.copytree(FIXTURE_REPO, root)


def _assert_invariants(project_map: ProjectMap) -> None:
    stats = project_map.statistics
    assert stats.total_files == len(project_map.files)
    assert sum(stats.by_language.values()) == stats.total_files
    assert sum(stats.by_symbol_kind.values()) == stats.total_symbols
    assert project_map.languages == sorted({f.language for f in project_map.files})


def test_map_of_fixture_repo(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    project_map = build_project_map(repo_root)

    _assert_invariants(project_map)
    assert project_map.root_path == str(repo_root.resolve())
    assert [f.path for f in project_map.files] == [
        "main.go",
        "pkg/store/store.go",
        "tools/script.py",
        "web/app.ts",
    ]
    assert project_map.languages == ["go", "python", "typescript"]
    assert project_map.partial is False

    stats = project_map.statistics
    assert stats.by_language == {"go": 2, "python": 1, "typescript": 1}
    assert stats.total_symbols == 17
    assert stats.by_symbol_kind == {
        "class": 2,
        "const": 2,
        "function": 5,
        "interface": 2,
        "method": 4,
        "struct": 1,
        "type": 1,
    }


def test_fixture_store_outline(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    project_map = build_project_map(repo_root, include_patterns=["store"])

    assert [f.path for f in project_map.files] == ["pkg/store/store.go"]
    store = project_map.files[0]
    assert store.language == "go"
    assert [(s.kind, s.name) for s in store.symbols] == [
        ("interface", "Store"),
        ("struct", "MemoryStore"),
        ("function", "NewMemoryStore"),
        ("method", "Get"),
    ]
    assert [c.name for c in store.symbols[0].children] == ["Get", "Put"]
    assert store.symbols[1].signature == "struct MemoryStore (2 fields)"


def test_ignored_and_skipped_paths_never_reach_the_map(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    project_map = build_project_map(
        repo_root, include_patterns=["node_modules", "generated", ".go"]
    )

    paths = [f.path for f in project_map.files]
    assert paths == ["main.go", "pkg/store/store.go"]
    names = {s.name for f in project_map.files for s in f.symbols}
    assert "vendored" not in names
    assert "generated" not in names


def test_max_files_cap(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("def a():\n    pass\n", encoding="utf-8")
    (tmp_path / "b.py").write_text("def b():\n    pass\n", encoding="utf-8")

    project_map = build_project_map(tmp_path, max_files=1)

    assert len(project_map.files) == 1
    assert project_map.statistics.total_files == 1
    assert project_map.partial is True


def test_max_files_defaults_to_config(tmp_path: Path) -> None:
    for name in ("a.py", "b.py", "c.py"):
        (tmp_path / name).write_text("", encoding="utf-8")

    project_map = build_project_map(tmp_path, config=CodeMapConfig(max_files=2))

    assert [f.path for f in project_map.files] == ["a.py", "b.py"]


def test_config_ignore_tables_are_used(tmp_path: Path) -> None:
    (tmp_path / "build").mkdir()
    (tmp_path / "build" / "gen.py").write_text("def gen():\n", encoding="utf-8")
    (tmp_path / "fixtures").mkdir()
    (tmp_path / "fixtures" / "data.py").write_text("def data():\n", encoding="utf-8")

    config = CodeMapConfig(ignore=IgnoreConfig(skip_dirs=["fixtures"]))
    project_map = build_project_map(tmp_path, config=config)

    assert [f.path for f in project_map.files] == ["build/gen.py"]


def test_unparsable_and_binary_files_are_omitted(tmp_path: Path) -> None:
    (tmp_path / "broken.go").write_text("package main\n\nfunc broken( {\n", encoding="utf-8")
    (tmp_path / "blob.c").write_bytes(b"int main() {\x00\x01\x02")
    (tmp_path / "latin1.py").write_bytes(b"def caf\xe9():\n    pass\n")
    (tmp_path / "ok.py").write_text("def ok():\n    pass\n", encoding="utf-8")

    project_map = build_project_map(tmp_path)

    _assert_invariants(project_map)
    assert [f.path for f in project_map.files] == ["ok.py"]
    assert project_map.statistics.total_lines == 3
    assert project_map.languages == ["python"]


def test_files_without_symbols_still_count(tmp_path: Path) -> None:
    (tmp_path / "empty.ts").write_text("", encoding="utf-8")

    project_map = build_project_map(tmp_path)

    assert project_map.statistics.total_files == 1
    assert project_map.statistics.total_lines == 1
    assert project_map.files[0].symbols == []


def test_missing_root_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ScanError):
        build_project_map(tmp_path / "missing")


def test_aggregate_skips_vanished_files(tmp_path: Path) -> None:
    present = tmp_path / "present.py"
    present.write_text("class Present:\n", encoding="utf-8")
    sources = [
        SourceFile(path=tmp_path / "gone.py", relative_path="gone.py", language="python"),
        SourceFile(path=present, relative_path="present.py", language="python"),
    ]

    project_map = aggregate(str(tmp_path), sources)

    assert [f.path for f in project_map.files] == ["present.py"]
    assert project_map.statistics.total_symbols == 1


def test_statistics_count_children_flat() -> None:
    interface = Symbol(
        name="Store",
        kind="interface",
        signature="interface Store",
        start_line=1,
        end_line=4,
        children=[
            Symbol(name="Get", kind="method", start_line=2, end_line=2),
            Symbol(name="Put", kind="method", start_line=3, end_line=3),
        ],
    )
    files = [
        FileSymbols(path="a.go", language="go", symbols=[interface], line_count=5),
        FileSymbols(path="b.py", language="python", symbols=[], line_count=1),
    ]

    stats = compute_statistics(files)

    assert stats == ProjectStatistics(
        total_files=2,
        total_lines=6,
        total_symbols=3,
        by_language={"go": 1, "python": 1},
        by_symbol_kind={"interface": 1, "method": 2},
    )


def test_project_map_rejects_inconsistent_statistics() -> None:
    with pytest.raises(ValueError, match="total_files"):
        ProjectMap(
            root_path="/repo",
            files=[],
            statistics=ProjectStatistics(total_files=1, by_language={"go": 1}),
        )


def test_symbol_rejects_inverted_span() -> None:
    with pytest.raises(ValueError, match="ends on line"):
        Symbol(name="bad", kind="function", start_line=5, end_line=4)


def test_package_entry_point_forwards_registry(tmp_path: Path) -> None:
    (tmp_path / "main.go").write_text("class Shadow:\n", encoding="utf-8")
    registry = ExtractorRegistry({}, fallback=PythonExtractor())

    project_map = codemap.build_project_map(tmp_path, registry=registry)

    assert [(s.kind, s.name) for s in project_map.files[0].symbols] == [
        ("class", "Shadow")
    ]
