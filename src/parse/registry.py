"""Language to extractor dispatch."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from parse.patterns import GenericExtractor, PythonExtractor, TypeScriptExtractor
from parse.treesitter_go import GoExtractor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from codemap.models import Symbol
    from parse.base import Extractor


class ExtractorRegistry:
    """Selects the extractor for a classified language.

    Languages without a dedicated extractor use ``fallback``. The registry
    is only consulted for files the language classifier recognized.
    """

    def __init__(
        self,
        extractors: Mapping[str, Extractor],
        fallback: Extractor,
    ) -> None:
        self._extractors: Mapping[str, Extractor] = MappingProxyType(dict(extractors))
        self._fallback = fallback

    def get(self, language: str) -> Extractor:
        return self._extractors.get(language, self._fallback)

    def extract(self, content: str, language: str) -> list[Symbol]:
        """Extract symbols; may raise ExtractionError."""
        return self.get(language).extract(content)


def default_registry() -> ExtractorRegistry:
    typescript = TypeScriptExtractor()
    return ExtractorRegistry(
        {
            "go": GoExtractor(),
            "typescript": typescript,
            "javascript": typescript,
            "python": PythonExtractor(),
        },
        fallback=GenericExtractor(),
    )


__all__ = ["ExtractorRegistry", "default_registry"]
