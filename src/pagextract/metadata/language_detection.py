"""Language identification fallback for documents without a language tag."""

from __future__ import annotations

from functools import lru_cache

_DEFAULT_SAMPLE_CHARS = 3000


@lru_cache(maxsize=1)
def _get_detector():
    from lingua import LanguageDetectorBuilder

    return LanguageDetectorBuilder.from_all_languages().with_minimum_relative_distance(0.1).build()


def identify_language(text: str, *, sample_chars: int = _DEFAULT_SAMPLE_CHARS) -> str | None:
    """Return the lower-case ISO 639-1 code of *text*.

    Only the first *sample_chars* characters are inspected.  Returns ``None``
    for blank input or when the detector is inconclusive.
    """
    if not text:
        return None

    sample = text[:sample_chars].strip()
    if not sample:
        return None

    result = _get_detector().detect_language_of(sample)
    if result is None:
        return None

    return result.iso_code_639_1.name.lower()
