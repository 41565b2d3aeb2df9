"""EPUB adapter reading Dublin Core metadata and spine text."""

from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory

import ebooklib
from ebooklib import epub
from bs4 import BeautifulSoup

from pagextract.extraction.adapters.base import base_metadata, put_if_present
from pagextract.extraction.models import ParsedDocument
from pagextract.normalization import normalize_whitespace

_ZIP_MAGIC = b"PK\x03\x04"
_EPUB_MIMETYPE_MARKER = b"mimetypeapplication/epub+zip"

# Dublin Core element -> raw metadata keys
_DC_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("dc:title", "title"),
    "creator": ("dc:creator", "creator"),
    "language": ("dc:language", "language"),
    "description": ("dc:description", "description"),
    "subject": ("dc:subject", "subject"),
    "publisher": ("dc:publisher",),
    "date": ("dcterms:created", "meta:creation-date"),
}


def _first_non_empty(values: list[tuple[str, dict[str, str]]] | None) -> str | None:
    if not values:
        return None
    for value, _attrs in values:
        cleaned = normalize_whitespace(value or "")
        if cleaned:
            return cleaned
    return None


def _item_text(xhtml: bytes) -> str:
    soup = BeautifulSoup(xhtml, "xml")
    body = soup.body or soup
    return body.get_text("\n", strip=True)


class EPUBAdapter:
    """Parse EPUB uploads with EbookLib in spine order."""

    mimetype = "application/epub+zip"

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        if filename.lower().endswith(".epub"):
            return True
        if sniffed_bytes is None or not sniffed_bytes.startswith(_ZIP_MAGIC):
            return False
        return _EPUB_MIMETYPE_MARKER in sniffed_bytes[:128]

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        with TemporaryDirectory() as tmp:
            source = Path(tmp) / "upload.epub"
            source.write_bytes(payload)
            book = epub.read_epub(str(source))

        metadata = self._extract_metadata(book, filename)
        text = self._extract_text(book)
        return ParsedDocument(mimetype=self.mimetype, text=text, metadata=metadata)

    def _extract_metadata(self, book: epub.EpubBook, filename: str | None) -> dict[str, str]:
        metadata = base_metadata(self.mimetype, filename)
        for element, keys in _DC_FIELDS.items():
            put_if_present(metadata, keys, _first_non_empty(book.get_metadata("DC", element)))
        return metadata

    def _extract_text(self, book: epub.EpubBook) -> str:
        parts: list[str] = []
        for spine_entry in book.spine:
            item_id = spine_entry[0] if isinstance(spine_entry, tuple) else spine_entry
            item = book.get_item_with_id(item_id)
            if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
                continue
            text = _item_text(item.get_content())
            if text:
                parts.append(text)
        return "\n".join(parts)
