"""Shared adapter contract for per-format document parsers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pagextract.extraction.models import ParsedDocument


@runtime_checkable
class FormatAdapter(Protocol):
    """Protocol that every format adapter must implement."""

    mimetype: str

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        """Return True when this adapter can parse the given upload."""

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        """Decode the payload into full text, raw metadata and optional page markup."""


def base_metadata(mimetype: str, filename: str | None) -> dict[str, str]:
    """Metadata entries every adapter reports."""

    metadata = {"Content-Type": mimetype}
    if filename:
        metadata["resourceName"] = filename
    return metadata


def put_if_present(metadata: dict[str, str], keys: tuple[str, ...], value: str | None) -> None:
    """Store *value* under every key in *keys* when it carries text."""

    if value is None:
        return
    cleaned = value.strip()
    if not cleaned:
        return
    for key in keys:
        metadata[key] = cleaned
