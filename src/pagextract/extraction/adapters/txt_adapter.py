"""TXT adapter with encoding detection."""

from __future__ import annotations

from charset_normalizer import from_bytes

from pagextract.extraction.adapters.base import base_metadata
from pagextract.extraction.models import ParsedDocument

_BINARY_PREFIXES = (b"%PDF-", b"PK\x03\x04", b"<?xml", b"<FictionBook")


class TXTAdapter:
    """Decode plain-text uploads with robust charset handling."""

    mimetype = "text/plain"

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        if filename.lower().endswith(".txt"):
            return True
        if sniffed_bytes is None:
            return False

        prefix = sniffed_bytes.lstrip()
        if prefix.startswith(_BINARY_PREFIXES):
            return False

        return b"\x00" not in sniffed_bytes

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        encoding = self._detect_encoding(payload)
        text = payload.decode(encoding)

        metadata = base_metadata(f"{self.mimetype}; charset={encoding}", filename)
        metadata["Content-Encoding"] = encoding
        return ParsedDocument(mimetype=self.mimetype, text=text, metadata=metadata)

    def _detect_encoding(self, raw: bytes) -> str:
        if not raw:
            return "utf-8"

        best = from_bytes(raw).best()
        if best and best.encoding:
            name = best.encoding.lower()
            if name in {"windows-1251", "cp1251"}:
                return "cp1251"
            return best.encoding

        for fallback in ("utf-8", "cp1251"):
            try:
                raw.decode(fallback)
                return fallback
            except UnicodeDecodeError:
                continue
        raise ValueError("Could not detect TXT encoding")
