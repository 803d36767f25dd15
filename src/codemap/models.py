"""Models for the codebase map.

A ``ProjectMap`` owns one ``FileSymbols`` per mapped file, each holding the
ordered ``Symbol`` outline of that file, plus the derived
``ProjectStatistics``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

SymbolKind = Literal[
    "function",
    "method",
    "type",
    "struct",
    "interface",
    "class",
    "const",
    "var",
]


class Symbol(BaseModel):
    """A named declaration extracted from a source file."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: SymbolKind
    signature: str | None = None
    start_line: int = Field(ge=1)
    end_line: int = Field(ge=1)
    children: list[Symbol] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_span(self) -> Symbol:
        if self.start_line > self.end_line:
            msg = (
                f"symbol '{self.name}' ends on line {self.end_line} "
                f"before it starts on line {self.start_line}"
            )
            raise ValueError(msg)
        return self


class FileSymbols(BaseModel):
    """Symbol outline of one file; ``path`` is relative to the scan root."""

    model_config = ConfigDict(frozen=True)

    path: str
    language: str
    symbols: list[Symbol] = Field(default_factory=list)
    line_count: int = Field(ge=0)


class ProjectStatistics(BaseModel):
    total_files: int = 0
    total_lines: int = 0
    total_symbols: int = 0
    by_language: dict[str, int] = Field(default_factory=dict)
    by_symbol_kind: dict[str, int] = Field(default_factory=dict)


class ProjectMap(BaseModel):
    """Whole-project symbol map produced by one scan."""

    root_path: str
    languages: list[str] = Field(default_factory=list)
    files: list[FileSymbols] = Field(default_factory=list)
    statistics: ProjectStatistics = Field(default_factory=ProjectStatistics)
    partial: bool = Field(
        default=False,
        exclude=True,
        description="True when the file limit stopped the walk early",
    )

    @model_validator(mode="after")
    def _check_statistics(self) -> ProjectMap:
        stats = self.statistics
        if stats.total_files != len(self.files):
            msg = (
                f"statistics.total_files is {stats.total_files} "
                f"but the map holds {len(self.files)} files"
            )
            raise ValueError(msg)
        if sum(stats.by_language.values()) != stats.total_files:
            msg = "statistics.by_language does not add up to total_files"
            raise ValueError(msg)
        return self


def flatten_symbols(symbols: list[Symbol]) -> list[Symbol]:
    """Flatten symbols and their children, parents first."""
    flat: list[Symbol] = []
    for symbol in symbols:
        flat.append(symbol)
        flat.extend(flatten_symbols(symbol.children))
    return flat


__all__ = [
    "FileSymbols",
    "ProjectMap",
    "ProjectStatistics",
    "Symbol",
    "SymbolKind",
    "flatten_symbols",
]
