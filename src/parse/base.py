"""Extractor interface shared by the language-specific symbol extractors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codemap.models import Symbol


class ExtractionError(Exception):
    """Raised when a file cannot be turned into a symbol outline."""


class Extractor(Protocol):
    """Turns the text of one source file into its top-level symbols."""

    def extract(self, content: str) -> list[Symbol]: ...


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, so line numbers agree with ``count("\\n") + 1``."""
    return content.split("\n")


__all__ = ["ExtractionError", "Extractor", "split_lines"]
