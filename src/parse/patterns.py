"""Line-oriented regex extractors for languages without a grammar-aware parser.

These extractors only see one line at a time, so every symbol they report
starts and ends on the matched line and has no children.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from codemap.models import Symbol
from parse.base import split_lines

if TYPE_CHECKING:
    from codemap.models import SymbolKind

TS_FUNCTION_PATTERN = re.compile(r"^(?:export\s+)?(?:async\s+)?function\s+(\w+)\s*[<(]")
TS_CLASS_PATTERN = re.compile(r"^(?:export\s+)?(?:abstract\s+)?class\s+(\w+)")
TS_INTERFACE_PATTERN = re.compile(r"^(?:export\s+)?interface\s+(\w+)")
TS_TYPE_PATTERN = re.compile(r"^(?:export\s+)?type\s+(\w+)\s*=")
TS_CONST_PATTERN = re.compile(r"^(?:export\s+)?const\s+(\w+)\s*[=:]")

PY_FUNCTION_PATTERN = re.compile(r"^([ \t]*)(?:async\s+)?def\s+(\w+)\s*\(")
PY_CLASS_PATTERN = re.compile(r"^class\s+(\w+)")

GENERIC_FUNCTION_PATTERN = re.compile(
    r"^\s*(?:pub(?:lic)?\s+)?(?:static\s+)?(?:async\s+)?(?:\w+\s+)?(\w+)\s*\([^)]*\)\s*[{:]"
)

# Keywords the generic pattern would otherwise report as function names.
GENERIC_KEYWORDS = frozenset(
    {"if", "for", "while", "switch", "catch", "return", "sizeof", "else"}
)


def _line_symbol(name: str, kind: SymbolKind, line_num: int) -> Symbol:
    return Symbol(name=name, kind=kind, start_line=line_num, end_line=line_num)


class TypeScriptExtractor:
    """Declarations of TypeScript and JavaScript files."""

    _patterns: tuple[tuple[re.Pattern[str], SymbolKind], ...] = (
        (TS_FUNCTION_PATTERN, "function"),
        (TS_CLASS_PATTERN, "class"),
        (TS_INTERFACE_PATTERN, "interface"),
        (TS_TYPE_PATTERN, "type"),
    )

    def extract(self, content: str) -> list[Symbol]:
        symbols: list[Symbol] = []
        for line_num, line in enumerate(split_lines(content), start=1):
            for pattern, kind in self._patterns:
                match = pattern.match(line)
                if match:
                    symbols.append(_line_symbol(match.group(1), kind, line_num))

            # Indented constants belong to a function or class body.
            match = TS_CONST_PATTERN.match(line)
            if match and not line.startswith((" ", "\t")):
                symbols.append(_line_symbol(match.group(1), "const", line_num))
        return symbols


class PythonExtractor:
    """``def``/``async def`` and top-level ``class`` statements.

    A ``def`` with leading whitespace is reported as a method; nothing
    checks that the enclosing block really is a class.
    """

    def extract(self, content: str) -> list[Symbol]:
        symbols: list[Symbol] = []
        for line_num, line in enumerate(split_lines(content), start=1):
            match = PY_FUNCTION_PATTERN.match(line)
            if match:
                kind: SymbolKind = "method" if match.group(1) else "function"
                symbols.append(_line_symbol(match.group(2), kind, line_num))

            match = PY_CLASS_PATTERN.match(line)
            if match:
                symbols.append(_line_symbol(match.group(1), "class", line_num))
        return symbols


class GenericExtractor:
    """Loose function-like declarations for C-like languages.

    Control-flow keywords in ``GENERIC_KEYWORDS`` (``if (x) {``, ``for (...) {``)
    match the same shape and are never reported as functions.
    """

    def extract(self, content: str) -> list[Symbol]:
        symbols: list[Symbol] = []
        for line_num, line in enumerate(split_lines(content), start=1):
            match = GENERIC_FUNCTION_PATTERN.match(line)
            if match and match.group(1) not in GENERIC_KEYWORDS:
                symbols.append(_line_symbol(match.group(1), "function", line_num))
        return symbols


__all__ = [
    "GenericExtractor",
    "PythonExtractor",
    "TypeScriptExtractor",
]
