"""OpenDocument and Office Open XML adapter.

Both families are zip containers holding XML parts. OpenDocument keeps its
properties in ``meta.xml`` and the body in ``content.xml``; Office Open XML
splits properties into ``docProps/core.xml`` and ``docProps/app.xml`` and
stores text per application (``word/document.xml``, one part per slide,
shared strings for spreadsheets).
"""

from __future__ import annotations

from io import BytesIO
import logging
import re
from zipfile import BadZipFile, ZipFile

from lxml import etree

from pagextract.extraction.adapters.base import base_metadata, put_if_present
from pagextract.extraction.models import ParsedDocument
from pagextract.normalization import normalize_whitespace

logger = logging.getLogger(__name__)

_ZIP_MAGIC = b"PK\x03\x04"
_ODF_MARKER = b"mimetypeapplication/vnd.oasis.opendocument."
_OOXML_MARKER = b"[Content_Types].xml"
_OFFICE_SUFFIXES = (".odt", ".ods", ".odp", ".odg", ".docx", ".xlsx", ".pptx")

_OOXML_MAIN_PARTS = (
    ("word/document.xml", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ("ppt/presentation.xml", "application/vnd.openxmlformats-officedocument.presentationml.presentation"),
    ("xl/workbook.xml", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
)
_SLIDE_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$")

# element local-name -> raw metadata keys
_ODF_META_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("dc:title", "title"),
    "description": ("description", "dc:description"),
    "subject": ("dc:subject", "subject"),
    "initial-creator": ("meta:author", "dc:creator", "creator"),
    "creator": ("meta:last-author",),
    "creation-date": ("meta:creation-date", "dcterms:created"),
    "date": ("Last-Modified", "dcterms:modified"),
    "language": ("language", "dc:language"),
    "editing-cycles": ("editing-cycles",),
    "generator": ("xmp:CreatorTool",),
}
_ODF_STATISTICS: dict[str, tuple[str, ...]] = {
    "page-count": ("meta:page-count", "xmpTPg:NPages"),
    "word-count": ("meta:word-count",),
    "character-count": ("meta:character-count",),
}
_OOXML_CORE_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("dc:title", "title"),
    "subject": ("dc:subject", "subject"),
    "creator": ("meta:author", "dc:creator", "creator"),
    "keywords": ("Keywords", "meta:keyword"),
    "description": ("description", "dc:description"),
    "lastModifiedBy": ("meta:last-author",),
    "revision": ("cp:revision",),
    "created": ("meta:creation-date", "dcterms:created"),
    "modified": ("Last-Modified", "dcterms:modified"),
    "language": ("language", "dc:language"),
}
_OOXML_APP_FIELDS: dict[str, tuple[str, ...]] = {
    "Pages": ("meta:page-count", "xmpTPg:NPages"),
    "Words": ("meta:word-count",),
    "Characters": ("meta:character-count",),
    "Slides": ("meta:slide-count",),
    "Application": ("xmp:CreatorTool",),
}


def _parse_xml(raw: bytes) -> etree._Element:
    parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
    return etree.fromstring(raw, parser=parser)


def _child_text(root: etree._Element, local_name: str) -> str | None:
    for node in root.xpath(f"//*[local-name()='{local_name}']"):
        text = normalize_whitespace(" ".join(node.itertext()))
        if text:
            return text
    return None


def _paragraphs(root: etree._Element, paragraph_names: tuple[str, ...], run_name: str | None) -> list[str]:
    condition = " or ".join(f"local-name()='{name}'" for name in paragraph_names)
    lines: list[str] = []
    for node in root.xpath(f".//*[{condition}]"):
        if run_name is None:
            text = "".join(node.itertext())
        else:
            text = "".join("".join(run.itertext()) for run in node.xpath(f".//*[local-name()='{run_name}']"))
        if text.strip():
            lines.append(text)
    return lines


class OfficeAdapter:
    """Extract text and document properties from office documents."""

    mimetype = "application/vnd.oasis.opendocument.text"

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        if filename.lower().endswith(_OFFICE_SUFFIXES):
            return True
        if sniffed_bytes is None or not sniffed_bytes.startswith(_ZIP_MAGIC):
            return False
        return _ODF_MARKER in sniffed_bytes[:128] or _OOXML_MARKER in sniffed_bytes

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        try:
            archive = ZipFile(BytesIO(payload), "r")
        except BadZipFile as exc:
            raise ValueError("Office document is not a zip container") from exc

        with archive:
            names = set(archive.namelist())
            if "mimetype" in names and "content.xml" in names:
                return self._parse_odf(archive, filename)
            for part, mimetype in _OOXML_MAIN_PARTS:
                if part in names:
                    return self._parse_ooxml(archive, names, mimetype, filename)
        raise ValueError("Office container has neither OpenDocument nor Office Open XML parts")

    def _parse_odf(self, archive: ZipFile, filename: str | None) -> ParsedDocument:
        mimetype = archive.read("mimetype").decode("ascii", errors="replace").strip() or self.mimetype
        metadata = base_metadata(mimetype, filename)

        if "meta.xml" in archive.namelist():
            meta_root = _parse_xml(archive.read("meta.xml"))
            for local_name, keys in _ODF_META_FIELDS.items():
                put_if_present(metadata, keys, _child_text(meta_root, local_name))

            keywords: list[str] = []
            for node in meta_root.xpath("//*[local-name()='keyword']"):
                keyword = normalize_whitespace(" ".join(node.itertext()))
                if keyword:
                    keywords.append(keyword)
            if keywords:
                put_if_present(metadata, ("Keywords", "meta:keyword"), ", ".join(keywords))

            for attribute, keys in _ODF_STATISTICS.items():
                values = meta_root.xpath(f"//*[local-name()='document-statistic']/@*[local-name()='{attribute}']")
                put_if_present(metadata, keys, str(values[0]) if values else None)

        content_root = _parse_xml(archive.read("content.xml"))
        bodies = content_root.xpath("//*[local-name()='body']") or [content_root]
        lines: list[str] = []
        for body in bodies:
            lines.extend(_paragraphs(body, ("p", "h"), None))
        return ParsedDocument(mimetype=mimetype, text="\n".join(lines), metadata=metadata)

    def _parse_ooxml(
        self,
        archive: ZipFile,
        names: set[str],
        mimetype: str,
        filename: str | None,
    ) -> ParsedDocument:
        metadata = base_metadata(mimetype, filename)
        for part, fields in (("docProps/core.xml", _OOXML_CORE_FIELDS), ("docProps/app.xml", _OOXML_APP_FIELDS)):
            if part not in names:
                continue
            root = _parse_xml(archive.read(part))
            for local_name, keys in fields.items():
                put_if_present(metadata, keys, _child_text(root, local_name))

        lines: list[str] = []
        for part in self._text_parts(names):
            root = _parse_xml(archive.read(part))
            if part.startswith("xl/"):
                lines.extend(_paragraphs(root, ("si",), "t"))
            else:
                lines.extend(_paragraphs(root, ("p",), "t"))
        logger.debug("Read %d paragraphs from %s", len(lines), mimetype)
        return ParsedDocument(mimetype=mimetype, text="\n".join(lines), metadata=metadata)

    def _text_parts(self, names: set[str]) -> list[str]:
        if "word/document.xml" in names:
            return ["word/document.xml"]
        slides: list[tuple[int, str]] = []
        for name in names:
            match = _SLIDE_RE.match(name)
            if match is not None:
                slides.append((int(match.group(1)), name))
        slides.sort()
        if slides:
            return [name for _number, name in slides]
        if "xl/sharedStrings.xml" in names:
            return ["xl/sharedStrings.xml"]
        return []
