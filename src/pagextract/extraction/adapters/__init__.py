"""Per-format parsers turning uploads into text, raw metadata and page markup."""

from .base import FormatAdapter
from .epub_adapter import EPUBAdapter
from .fb2_adapter import FB2Adapter
from .image_adapter import ImageAdapter
from .office_adapter import OfficeAdapter
from .pdf_adapter import PDFAdapter
from .txt_adapter import TXTAdapter


def build_default_adapters() -> dict[str, FormatAdapter]:
    """Adapters keyed by name; the first whose ``supports`` accepts an upload parses it.

    Zip-based formats are told apart by the first entry of the container.
    Plain text accepts any payload without binary markers and stays last.
    """

    return {
        "pdf": PDFAdapter(),
        "epub": EPUBAdapter(),
        "fb2": FB2Adapter(),
        "office": OfficeAdapter(),
        "image": ImageAdapter(),
        "txt": TXTAdapter(),
    }


__all__ = [
    "FormatAdapter",
    "EPUBAdapter",
    "FB2Adapter",
    "ImageAdapter",
    "OfficeAdapter",
    "PDFAdapter",
    "TXTAdapter",
    "build_default_adapters",
]
