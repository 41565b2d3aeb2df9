"""Extraction package interfaces."""

from .extractor import DocumentExtractor, ExtractionError, ExtractionOptions, ExtractionResult
from .pages import PageAccumulator

__all__ = [
    "DocumentExtractor",
    "ExtractionError",
    "ExtractionOptions",
    "ExtractionResult",
    "PageAccumulator",
]
