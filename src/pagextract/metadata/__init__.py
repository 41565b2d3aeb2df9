"""Metadata normalization package interfaces."""

from .normalizer import MetadataValue, UnifiedMetadata, normalize_metadata

__all__ = ["MetadataValue", "UnifiedMetadata", "normalize_metadata"]
