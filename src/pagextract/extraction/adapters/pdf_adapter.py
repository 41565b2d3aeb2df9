"""PDF adapter producing full text, raw metadata and page-structured XHTML."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import re

from lxml import etree
import pymupdf

from pagextract.extraction.adapters.base import base_metadata, put_if_present
from pagextract.extraction.models import ParsedDocument
from pagextract.normalization import strip_xml_invalid

logger = logging.getLogger(__name__)

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"

_PDF_MAGIC = b"%PDF-"
_PDF_DATE_RE = re.compile(
    r"^(?:D:)?(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?:(?P<sign>[Zz+\-])(?P<tz_hour>\d{2})?'?(?P<tz_minute>\d{2})?'?)?"
)
_TEXT_BLOCK = 0


def _xhtml(tag: str) -> str:
    return f"{{{XHTML_NAMESPACE}}}{tag}"


def pdf_date_to_iso(raw: str | None) -> str | None:
    """Convert a PDF date string (``D:YYYYMMDDHHmmSSOHH'mm'``) to ISO-8601 UTC."""

    if not raw:
        return None
    match = _PDF_DATE_RE.match(raw.strip())
    if match is None:
        return None

    parts = match.groupdict()
    offset = timedelta(0)
    sign = parts["sign"]
    if sign in {"+", "-"}:
        offset = timedelta(hours=int(parts["tz_hour"] or 0), minutes=int(parts["tz_minute"] or 0))
        if sign == "-":
            offset = -offset

    try:
        stamp = datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            tzinfo=timezone(offset),
        )
    except ValueError:
        logger.debug("Ignoring malformed PDF date %r", raw)
        return None

    return stamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _pdf_version(format_name: str | None) -> str | None:
    if not format_name or not format_name.upper().startswith("PDF"):
        return None
    version = format_name[3:].strip()
    return version or None


def _catalog_language(doc: pymupdf.Document) -> str | None:
    if not doc.is_pdf:
        return None
    value_type, value = doc.xref_get_key(doc.pdf_catalog(), "Lang")
    if value_type != "string":
        return None
    return value


class PDFAdapter:
    """Parse PDF uploads with PyMuPDF, one ``<div class="page">`` per page."""

    mimetype = "application/pdf"

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        if sniffed_bytes is not None and sniffed_bytes.startswith(_PDF_MAGIC):
            return True
        return filename.lower().endswith(".pdf")

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        with pymupdf.open(stream=payload, filetype="pdf") as doc:
            if doc.needs_pass:
                raise ValueError("PDF is password protected")

            metadata = self._extract_metadata(doc, filename)
            page_blocks = [self._page_blocks(page) for page in doc]
            text = "\n".join(page.get_text("text") for page in doc)

        xhtml = self._render_xhtml(page_blocks, metadata.get("dc:title"))
        return ParsedDocument(mimetype=self.mimetype, text=text, metadata=metadata, xhtml=xhtml)

    def _extract_metadata(self, doc: pymupdf.Document, filename: str | None) -> dict[str, str]:
        doc_metadata = doc.metadata or {}
        metadata = base_metadata(self.mimetype, filename)

        put_if_present(metadata, ("dc:title", "title"), doc_metadata.get("title"))
        put_if_present(metadata, ("meta:author", "dc:creator", "creator"), doc_metadata.get("author"))
        put_if_present(metadata, ("dc:subject", "subject"), doc_metadata.get("subject"))
        put_if_present(metadata, ("Keywords", "meta:keyword"), doc_metadata.get("keywords"))
        put_if_present(metadata, ("xmp:CreatorTool",), doc_metadata.get("creator"))
        put_if_present(metadata, ("pdf:producer",), doc_metadata.get("producer"))
        put_if_present(metadata, ("pdf:PDFVersion",), _pdf_version(doc_metadata.get("format")))
        put_if_present(
            metadata,
            ("meta:creation-date", "dcterms:created"),
            pdf_date_to_iso(doc_metadata.get("creationDate")),
        )
        put_if_present(
            metadata,
            ("Last-Modified", "dcterms:modified"),
            pdf_date_to_iso(doc_metadata.get("modDate")),
        )
        put_if_present(metadata, ("language",), _catalog_language(doc))

        metadata["xmpTPg:NPages"] = str(doc.page_count)
        metadata["pdf:encrypted"] = "true" if doc.is_encrypted else "false"
        return metadata

    def _page_blocks(self, page: pymupdf.Page) -> list[str]:
        blocks = [block for block in page.get_text("blocks") if block[6] == _TEXT_BLOCK]
        ordered = sorted(blocks, key=lambda row: (row[1], row[0], row[5]))
        return [block[4] for block in ordered]

    def _render_xhtml(self, page_blocks: list[list[str]], title: str | None) -> bytes:
        html = etree.Element(_xhtml("html"), nsmap={None: XHTML_NAMESPACE})
        head = etree.SubElement(html, _xhtml("head"))
        title_node = etree.SubElement(head, _xhtml("title"))
        title_node.text = strip_xml_invalid(title or "")
        body = etree.SubElement(html, _xhtml("body"))

        for blocks in page_blocks:
            page_node = etree.SubElement(body, _xhtml("div"), attrib={"class": "page"})
            page_node.text = "\n"
            for block_text in blocks:
                paragraph = etree.SubElement(page_node, _xhtml("p"))
                paragraph.text = strip_xml_invalid(block_text)
                paragraph.tail = "\n"
            page_node.tail = "\n"

        return etree.tostring(html, xml_declaration=True, encoding="utf-8")
