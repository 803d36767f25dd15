"""Symbol extraction for the codebase map."""

from parse.base import ExtractionError, Extractor
from parse.patterns import GenericExtractor, PythonExtractor, TypeScriptExtractor
from parse.registry import ExtractorRegistry, default_registry
from parse.treesitter_go import GoExtractor

__all__ = [
    "ExtractionError",
    "Extractor",
    "ExtractorRegistry",
    "GenericExtractor",
    "GoExtractor",
    "PythonExtractor",
    "TypeScriptExtractor",
    "default_registry",
]
