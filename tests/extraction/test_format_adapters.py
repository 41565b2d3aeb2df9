from __future__ import annotations

from io import BytesIO
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZIP_STORED, ZipFile

from ebooklib import epub
from PIL import Image

from pagextract.extraction.adapters import build_default_adapters
from pagextract.extraction.adapters.base import FormatAdapter
from pagextract.extraction.adapters.epub_adapter import EPUBAdapter
from pagextract.extraction.adapters.fb2_adapter import FB2Adapter
from pagextract.extraction.adapters.image_adapter import ImageAdapter, exif_date_to_iso
from pagextract.extraction.adapters.office_adapter import OfficeAdapter
from pagextract.extraction.adapters.txt_adapter import TXTAdapter
from pagextract.extraction.extractor import DocumentExtractor, ExtractionOptions

_FB2 = """<?xml version="1.0" encoding="utf-8"?>
<FictionBook xmlns="http://www.gribuser.ru/xml/fictionbook/2.0">
  <description>
    <title-info>
      <book-title>Тихий лес</book-title>
      <author><first-name>Ирина</first-name><last-name>Лесная</last-name></author>
      <lang>ru</lang>
      <annotation><p>Короткая повесть.</p></annotation>
      <keywords>лес, осень</keywords>
      <date value="2001-09-01">2001</date>
    </title-info>
  </description>
  <body>
    <section><p>Первая глава.</p></section>
    <section><p>Вторая глава.</p></section>
  </body>
</FictionBook>
"""


def _build_epub(path: Path) -> bytes:
    book = epub.EpubBook()
    book.set_identifier("book-id")
    book.set_title("Epub Sample")
    book.add_author("John Smith")
    book.set_language("en")
    book.add_metadata("DC", "description", "A short sample book.")

    chapter = epub.EpubHtml(title="Chapter One", file_name="chapter_1.xhtml", lang="en")
    chapter.content = """
    <html><body>
      <h1>Chapter One</h1>
      <p>First paragraph.</p>
    </body></html>
    """

    book.add_item(chapter)
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.toc = (chapter,)
    book.spine = [chapter]
    epub.write_epub(str(path), book)
    return path.read_bytes()


def test_default_adapters_follow_protocol_and_routing_order() -> None:
    adapters = build_default_adapters()

    assert list(adapters) == ["pdf", "epub", "fb2", "office", "image", "txt"]
    assert all(isinstance(adapter, FormatAdapter) for adapter in adapters.values())


def test_epub_adapter_reads_dublin_core_and_spine_text(tmp_path: Path) -> None:
    payload = _build_epub(tmp_path / "sample.epub")
    adapter = EPUBAdapter()

    assert adapter.supports("upload", payload[:4096])
    parsed = adapter.parse(payload, "sample.epub")

    assert parsed.mimetype == "application/epub+zip"
    assert not parsed.is_paged
    assert parsed.metadata["dc:title"] == "Epub Sample"
    assert parsed.metadata["creator"] == "John Smith"
    assert parsed.metadata["language"] == "en"
    assert parsed.metadata["description"] == "A short sample book."
    assert "First paragraph." in parsed.text


def test_fb2_adapter_reads_title_info() -> None:
    adapter = FB2Adapter()
    payload = _FB2.encode("utf-8")

    assert adapter.supports("upload.bin", payload)
    parsed = adapter.parse(payload, "forest.fb2")

    assert parsed.metadata["dc:title"] == "Тихий лес"
    assert parsed.metadata["creator"] == "Ирина Лесная"
    assert parsed.metadata["language"] == "ru"
    assert parsed.metadata["description"] == "Короткая повесть."
    assert parsed.metadata["Keywords"] == "лес, осень"
    assert parsed.metadata["dcterms:created"] == "2001-09-01"
    assert parsed.metadata["meta:creation-date"] == "2001-09-01"
    assert "Первая глава." in parsed.text
    assert "Вторая глава." in parsed.text
    assert "Тихий лес" not in parsed.text


def test_fb2_adapter_unpacks_zipped_payload() -> None:
    buffer = BytesIO()
    with ZipFile(buffer, "w") as archive:
        archive.writestr("book.fb2", _FB2.encode("utf-8"))

    parsed = FB2Adapter().parse(buffer.getvalue(), "book.fb2.zip")

    assert parsed.metadata["dc:title"] == "Тихий лес"


def test_txt_adapter_decodes_cp1251() -> None:
    raw = "Привет мир, это обычный текстовый файл на русском языке.\nТихий лес.\n".encode("cp1251")
    adapter = TXTAdapter()

    assert adapter.supports("notes", raw)
    parsed = adapter.parse(raw, "notes.txt")

    assert parsed.mimetype == "text/plain"
    encoding = parsed.metadata["Content-Encoding"]
    assert parsed.metadata["Content-Type"] == f"text/plain; charset={encoding}"
    assert "Тихий лес." in parsed.text


def test_txt_adapter_rejects_binary_prefixes() -> None:
    adapter = TXTAdapter()

    assert not adapter.supports("upload", b"%PDF-1.4")
    assert not adapter.supports("upload", b"PK\x03\x04rest")
    assert not adapter.supports("upload", b"bin\x00ary")


_ODF_META = """<?xml version="1.0" encoding="UTF-8"?>
<office:document-meta xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0"
    xmlns:meta="urn:oasis:names:tc:opendocument:xmlns:meta:1.0"
    xmlns:dc="http://purl.org/dc/elements/1.1/" office:version="1.2">
  <office:meta>
    <meta:generator>LibreOffice/7.6</meta:generator>
    <dc:title>Quarterly Report</dc:title>
    <meta:initial-creator>Ada Lovelace</meta:initial-creator>
    <dc:creator>Charles Babbage</dc:creator>
    <meta:creation-date>2016-05-01T10:20:30.500000000</meta:creation-date>
    <dc:date>2016-06-02T08:00:00.120000000</dc:date>
    <meta:keyword>finance</meta:keyword>
    <meta:keyword>report</meta:keyword>
    <meta:editing-cycles>7</meta:editing-cycles>
    <meta:document-statistic meta:page-count="3" meta:word-count="1250" meta:character-count="7000"/>
  </office:meta>
</office:document-meta>
"""

_ODF_CONTENT = """<?xml version="1.0" encoding="UTF-8"?>
<office:document-content xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0"
    xmlns:text="urn:oasis:names:tc:opendocument:xmlns:text:1.0" office:version="1.2">
  <office:body>
    <office:text>
      <text:h>Summary</text:h>
      <text:p>Revenue   grew.</text:p>
    </office:text>
  </office:body>
</office:document-content>
"""

_DOCX_CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types"/>
"""

_DOCX_CORE = """<?xml version="1.0" encoding="UTF-8"?>
<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
    xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:dcterms="http://purl.org/dc/terms/"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <dc:title>Memo</dc:title>
  <dc:creator>Grace Hopper</dc:creator>
  <cp:revision>4</cp:revision>
  <dcterms:created xsi:type="dcterms:W3CDTF">2020-01-02T03:04:05Z</dcterms:created>
</cp:coreProperties>
"""

_DOCX_APP = """<?xml version="1.0" encoding="UTF-8"?>
<Properties xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties">
  <Application>Microsoft Office Word</Application>
  <Pages>2</Pages>
  <Words>42</Words>
</Properties>
"""

_DOCX_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:body>
    <w:p><w:r><w:t>Hello</w:t></w:r><w:r><w:t xml:space="preserve"> world</w:t></w:r></w:p>
    <w:p><w:r><w:t>Second line</w:t></w:r></w:p>
  </w:body>
</w:document>
"""


def _build_odt() -> bytes:
    buffer = BytesIO()
    with ZipFile(buffer, "w") as archive:
        archive.writestr("mimetype", "application/vnd.oasis.opendocument.text", compress_type=ZIP_STORED)
        archive.writestr("meta.xml", _ODF_META, compress_type=ZIP_DEFLATED)
        archive.writestr("content.xml", _ODF_CONTENT, compress_type=ZIP_DEFLATED)
    return buffer.getvalue()


def _build_docx() -> bytes:
    buffer = BytesIO()
    with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", _DOCX_CONTENT_TYPES)
        archive.writestr("docProps/core.xml", _DOCX_CORE)
        archive.writestr("docProps/app.xml", _DOCX_APP)
        archive.writestr("word/document.xml", _DOCX_DOCUMENT)
    return buffer.getvalue()


def _build_png(size: tuple[int, int]) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, "white").save(buffer, "PNG")
    return buffer.getvalue()


def _extract(filename: str, payload: bytes) -> dict[str, object]:
    extractor = DocumentExtractor(ExtractionOptions(include_raw_metadata=True, detect_language=False))
    return extractor.extract(filename, payload).to_dict()


def test_fb2_creation_date_reaches_unified_metadata() -> None:
    payload = _extract("forest.fb2", _FB2.encode("utf-8"))

    assert payload["meta"]["document_created"] == "2001-09-01"
    assert payload["meta"]["language"] == "ru"


def test_odt_statistics_reach_unified_metadata() -> None:
    payload = _build_odt()

    assert OfficeAdapter().supports("upload", payload[:4096])
    result = _extract("report.odt", payload)

    assert result["mimetype"] == "application/vnd.oasis.opendocument.text"
    assert result["content"] == "Summary Revenue grew."
    assert "pages" not in result
    assert result["rawmeta"]["editing-cycles"] == "7"
    assert result["rawmeta"]["meta:last-author"] == "Charles Babbage"
    assert result["rawmeta"]["xmp:CreatorTool"] == "LibreOffice/7.6"

    meta = result["meta"]
    assert meta["title"] == "Quarterly Report"
    assert meta["creator"] == "Ada Lovelace"
    assert meta["version"] == 7
    assert meta["page_count"] == 3
    assert meta["word_count"] == 1250
    assert meta["keywords"] == "finance, report"
    assert meta["document_created"] == "2016-05-01T10:20:30"
    assert meta["document_changed"] == "2016-06-02T08:00:00"


def test_docx_core_and_app_properties_reach_unified_metadata() -> None:
    payload = _build_docx()

    assert OfficeAdapter().supports("upload", payload[:4096])
    parsed = OfficeAdapter().parse(payload, "memo.docx")
    assert parsed.text == "Hello world\nSecond line"

    meta = _extract("memo.docx", payload)["meta"]
    assert meta["title"] == "Memo"
    assert meta["creator"] == "Grace Hopper"
    assert meta["version"] == 4
    assert meta["page_count"] == 2
    assert meta["word_count"] == 42
    assert meta["document_created"] == "2020-01-02T03:04:05"


def test_office_adapter_ignores_other_zip_payloads() -> None:
    buffer = BytesIO()
    with ZipFile(buffer, "w") as archive:
        archive.writestr("notes.txt", "plain")

    assert not OfficeAdapter().supports("archive.zip", buffer.getvalue())


def test_png_dimensions_reach_unified_metadata() -> None:
    payload = _build_png((40, 30))

    assert ImageAdapter().supports("upload", payload[:4096])
    result = _extract("pic.png", payload)

    assert result["mimetype"] == "image/png"
    assert result["content"] == ""
    assert result["meta"]["height"] == 30
    assert result["meta"]["width"] == 40


def test_jpeg_exif_descriptors_are_reported() -> None:
    exif = Image.Exif()
    exif[315] = "Jane Roe"
    exif[306] = "2016:05:01 10:20:30"
    buffer = BytesIO()
    Image.new("RGB", (16, 8), "black").save(buffer, "JPEG", exif=exif.tobytes())

    parsed = ImageAdapter().parse(buffer.getvalue(), "photo.jpg")

    assert parsed.mimetype == "image/jpeg"
    assert parsed.metadata["tiff:ImageLength"] == "8"
    assert parsed.metadata["tiff:ImageWidth"] == "16"
    assert parsed.metadata["creator"] == "Jane Roe"
    assert parsed.metadata["Last-Modified"] == "2016-05-01T10:20:30"


def test_exif_date_conversion() -> None:
    assert exif_date_to_iso("2016:05:01 10:20:30") == "2016-05-01T10:20:30"
    assert exif_date_to_iso("    :  :     :  :  ") is None
    assert exif_date_to_iso(None) is None
