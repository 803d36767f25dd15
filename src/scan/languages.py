"""Extension based language classification."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

LANGUAGE_EXTENSIONS: Mapping[str, str] = MappingProxyType(
    {
        ".go": "go",
        ".ts": "typescript",
        ".tsx": "typescript",
        ".js": "javascript",
        ".jsx": "javascript",
        ".py": "python",
        ".rs": "rust",
        ".java": "java",
        ".c": "c",
        ".cpp": "cpp",
        ".h": "c",
        ".hpp": "cpp",
    }
)


class LanguageClassifier:
    """Map file extensions to language tags using a fixed table."""

    def __init__(self, extensions: Mapping[str, str] | None = None) -> None:
        table = LANGUAGE_EXTENSIONS if extensions is None else extensions
        self._extensions: Mapping[str, str] = MappingProxyType(dict(table))

    @property
    def extensions(self) -> Mapping[str, str]:
        return self._extensions

    def classify(self, path: str | Path) -> str | None:
        """Return the language tag for ``path`` or None when unrecognized."""
        name = path if isinstance(path, str) else path.name
        name = name.rsplit("/", 1)[-1]
        dot = name.rfind(".")
        if dot < 0:
            return None
        return self._extensions.get(name[dot:])


__all__ = ["LANGUAGE_EXTENSIONS", "LanguageClassifier"]
