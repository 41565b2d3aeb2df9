"""FB2 adapter with raw and zipped container support."""

from __future__ import annotations

from io import BytesIO
from zipfile import ZipFile

from lxml import etree

from pagextract.extraction.adapters.base import base_metadata, put_if_present
from pagextract.extraction.models import ParsedDocument
from pagextract.normalization import normalize_whitespace

_ZIP_MAGIC = b"PK\x03\x04"
_FB2_MARKER = b"<FictionBook"
_TITLE_INFO = "//*[local-name()='title-info']"


class FB2Adapter:
    """Extract text and metadata from FictionBook sources."""

    mimetype = "application/x-fictionbook+xml"

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        lowered = filename.lower()
        if lowered.endswith((".fb2", ".fbz", ".fb2.zip")):
            return True
        if sniffed_bytes is None:
            return False
        return _FB2_MARKER in sniffed_bytes

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        xml_bytes = self._extract_from_zip(payload) if payload.startswith(_ZIP_MAGIC) else payload
        parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
        root = etree.fromstring(xml_bytes, parser=parser)

        metadata = self._extract_metadata(root, filename)
        text = self._extract_text(root)
        return ParsedDocument(mimetype=self.mimetype, text=text, metadata=metadata)

    def _extract_from_zip(self, raw: bytes) -> bytes:
        with ZipFile(BytesIO(raw), "r") as archive:
            candidates = [name for name in archive.namelist() if not name.endswith("/")]
            fb2_name = next((name for name in candidates if name.lower().endswith(".fb2")), None)
            target = fb2_name or (candidates[0] if candidates else None)
            if not target:
                raise ValueError("Zipped FB2 container has no readable files")
            return archive.read(target)

    def _extract_metadata(self, root: etree._Element, filename: str | None) -> dict[str, str]:
        metadata = base_metadata(self.mimetype, filename)
        put_if_present(
            metadata,
            ("dc:title", "title"),
            self._first_text(root.xpath(f"{_TITLE_INFO}/*[local-name()='book-title']")),
        )
        put_if_present(metadata, ("meta:author", "dc:creator", "creator"), self._extract_author(root))
        put_if_present(
            metadata,
            ("language",),
            self._first_text(root.xpath(f"{_TITLE_INFO}/*[local-name()='lang']")),
        )
        put_if_present(
            metadata,
            ("description",),
            self._first_text(root.xpath(f"{_TITLE_INFO}/*[local-name()='annotation']")),
        )
        put_if_present(
            metadata,
            ("Keywords",),
            self._first_text(root.xpath(f"{_TITLE_INFO}/*[local-name()='keywords']")),
        )
        put_if_present(
            metadata,
            ("meta:creation-date", "dcterms:created"),
            self._first_text(root.xpath(f"{_TITLE_INFO}/*[local-name()='date']/@value"))
            or self._first_text(root.xpath(f"{_TITLE_INFO}/*[local-name()='date']")),
        )
        return metadata

    def _extract_author(self, root: etree._Element) -> str | None:
        authors = root.xpath(f"{_TITLE_INFO}/*[local-name()='author']")
        names: list[str] = []
        for author in authors:
            first = self._first_text(author.xpath("./*[local-name()='first-name']"))
            middle = self._first_text(author.xpath("./*[local-name()='middle-name']"))
            last = self._first_text(author.xpath("./*[local-name()='last-name']"))
            full = normalize_whitespace(" ".join(part for part in [first, middle, last] if part))
            if full:
                names.append(full)
        return ", ".join(names) if names else None

    def _extract_text(self, root: etree._Element) -> str:
        bodies = root.xpath("//*[local-name()='body']")
        if not bodies:
            return "\n".join(root.itertext())
        return "\n".join("".join(body.itertext()) for body in bodies)

    def _first_text(self, nodes: list[object]) -> str | None:
        for node in nodes:
            if hasattr(node, "itertext"):
                text = normalize_whitespace(" ".join(node.itertext()))
            else:
                text = normalize_whitespace(str(node))
            if text:
                return text
        return None
