"""Text normalization helpers shared by page splitting and metadata handling."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_XML_INVALID_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_xml_invalid(text: str) -> str:
    """Drop control characters that cannot be serialized into XHTML."""

    return _XML_INVALID_RE.sub("", text)
