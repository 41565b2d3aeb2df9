"""Map parser-specific metadata tables onto one unified schema."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
import re
from typing import Callable, Mapping, Union

from pagextract.normalization import normalize_whitespace

logger = logging.getLogger(__name__)

MetadataValue = Union[int, str]
LanguageIdentifier = Callable[[str], Union[str, None]]

_TITLE_KEYS = ("dc:title", "title")
_DESCRIPTION_KEYS = ("description", "dc:subject", "subject")
_VERSION_KEYS = ("editing-cycles", "pdf:PDFVersion", "Revision-Number", "cp:revision")
_PAGE_COUNT_KEYS = ("meta:page-count", "xmpTPg:NPages")
_WORD_COUNT_KEYS = ("meta:word-count",)
_CREATOR_KEYS = ("meta:author", "creator")
_HEIGHT_KEYS = ("tiff:ImageLength",)
_WIDTH_KEYS = ("tiff:ImageWidth",)
_LANGUAGE_KEYS = ("language",)
_KEYWORDS_KEYS = ("Keywords",)
_CREATED_KEYS = ("meta:creation-date",)
_CHANGED_KEYS = ("Last-Modified",)

_TIMESTAMP_PREFIX_CHARS = 19
_INTEGER_RE = re.compile(r"[+-]?\d+")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


@dataclass(slots=True)
class UnifiedMetadata:
    """Normalized document metadata; ``None`` means not determinable."""

    title: str | None = None
    description: str | None = None
    version: MetadataValue | None = None
    page_count: MetadataValue | None = None
    word_count: MetadataValue | None = None
    creator: str | None = None
    height: MetadataValue | None = None
    width: MetadataValue | None = None
    language: str | None = None
    keywords: str | None = None
    document_created: str | None = None
    document_changed: str | None = None

    def to_dict(self) -> dict[str, MetadataValue]:
        return {name: value for name, value in asdict(self).items() if value is not None}


def _first_value(raw: Mapping[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = raw.get(key)
        if value and value.strip():
            return value
    return None


def _first_text(raw: Mapping[str, str], keys: tuple[str, ...]) -> str | None:
    value = _first_value(raw, keys)
    return value.strip() if value is not None else None


def coerce_integer(value: str) -> MetadataValue:
    """Parse *value* as a 32-bit integer, keeping the original string on failure."""

    candidate = value.strip()
    if not _INTEGER_RE.fullmatch(candidate):
        return value
    number = int(candidate)
    if not _INT_MIN <= number <= _INT_MAX:
        return value
    return number


def _first_integer(raw: Mapping[str, str], keys: tuple[str, ...]) -> MetadataValue | None:
    value = _first_value(raw, keys)
    return coerce_integer(value) if value is not None else None


def _first_timestamp(raw: Mapping[str, str], keys: tuple[str, ...]) -> str | None:
    value = _first_value(raw, keys)
    return value[:_TIMESTAMP_PREFIX_CHARS] if value is not None else None


def _resolve_language(
    raw: Mapping[str, str],
    full_text: str | None,
    *,
    detect_language: bool,
    identify_language: LanguageIdentifier | None,
) -> str | None:
    declared = _first_value(raw, _LANGUAGE_KEYS)
    if declared is not None:
        return declared
    if not detect_language:
        return None

    content = normalize_whitespace(full_text or "")
    if not content:
        return None

    identify = identify_language
    if identify is None:
        from pagextract.metadata.language_detection import identify_language as identify

    logger.debug("Guessing language of document...")
    return identify(content) or None


def normalize_metadata(
    raw: Mapping[str, str],
    full_text: str | None = None,
    *,
    detect_language: bool = True,
    identify_language: LanguageIdentifier | None = None,
) -> UnifiedMetadata:
    """Build :class:`UnifiedMetadata` from a raw parser metadata table.

    Each field walks its own chain of source keys and takes the first
    non-empty value.  Numeric fields become ``int`` when the value parses and
    keep the raw string otherwise.  When the table declares no ``language``
    and *detect_language* is set, the language is identified from
    *full_text*.
    """

    return UnifiedMetadata(
        title=_first_text(raw, _TITLE_KEYS),
        description=_first_text(raw, _DESCRIPTION_KEYS),
        version=_first_integer(raw, _VERSION_KEYS),
        page_count=_first_integer(raw, _PAGE_COUNT_KEYS),
        word_count=_first_integer(raw, _WORD_COUNT_KEYS),
        creator=_first_text(raw, _CREATOR_KEYS),
        height=_first_integer(raw, _HEIGHT_KEYS),
        width=_first_integer(raw, _WIDTH_KEYS),
        language=_resolve_language(
            raw,
            full_text,
            detect_language=detect_language,
            identify_language=identify_language,
        ),
        keywords=_first_text(raw, _KEYWORDS_KEYS),
        document_created=_first_timestamp(raw, _CREATED_KEYS),
        document_changed=_first_timestamp(raw, _CHANGED_KEYS),
    )
