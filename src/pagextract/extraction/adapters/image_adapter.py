"""Image adapter reporting pixel dimensions and EXIF descriptors."""

from __future__ import annotations

from io import BytesIO
import logging
import re

from PIL import Image

from pagextract.extraction.adapters.base import base_metadata, put_if_present
from pagextract.extraction.models import ParsedDocument

logger = logging.getLogger(__name__)

_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".tif", ".tiff", ".bmp", ".webp")
_IMAGE_MAGICS = (
    b"\x89PNG\r\n\x1a\n",
    b"\xff\xd8\xff",
    b"GIF87a",
    b"GIF89a",
    b"II*\x00",
    b"MM\x00*",
)
_EXIF_DATE_RE = re.compile(r"^(\d{4}):(\d{2}):(\d{2})[ T](\d{2}:\d{2}:\d{2})")

# EXIF tag ids
_IMAGE_DESCRIPTION = 270
_SOFTWARE = 305
_DATE_TIME = 306
_ARTIST = 315
_EXIF_IFD = 0x8769
_DATE_TIME_ORIGINAL = 36867


def exif_date_to_iso(raw: str | None) -> str | None:
    """Convert an EXIF ``YYYY:MM:DD HH:MM:SS`` stamp to ``YYYY-MM-DDTHH:MM:SS``."""

    if not raw:
        return None
    match = _EXIF_DATE_RE.match(raw.strip())
    if match is None:
        return None
    year, month, day, clock = match.groups()
    return f"{year}-{month}-{day}T{clock}"


def _is_webp(sniffed_bytes: bytes) -> bool:
    return sniffed_bytes.startswith(b"RIFF") and sniffed_bytes[8:12] == b"WEBP"


def _exif_text(value: object) -> str | None:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return None
    return value.strip("\x00 ") or None


class ImageAdapter:
    """Read image headers with Pillow; images carry no extractable text."""

    mimetype = "image/*"

    def supports(self, filename: str, sniffed_bytes: bytes | None = None) -> bool:
        if filename.lower().endswith(_IMAGE_SUFFIXES):
            return True
        if sniffed_bytes is None:
            return False
        return sniffed_bytes.startswith(_IMAGE_MAGICS) or _is_webp(sniffed_bytes)

    def parse(self, payload: bytes, filename: str | None = None) -> ParsedDocument:
        with Image.open(BytesIO(payload)) as image:
            mimetype = Image.MIME.get(image.format or "", "application/octet-stream")
            width, height = image.size
            metadata = base_metadata(mimetype, filename)
            metadata["tiff:ImageLength"] = str(height)
            metadata["tiff:ImageWidth"] = str(width)
            if image.mode:
                metadata["Image Mode"] = image.mode
            self._read_exif(image, metadata)

        return ParsedDocument(mimetype=mimetype, text="", metadata=metadata)

    def _read_exif(self, image: Image.Image, metadata: dict[str, str]) -> None:
        exif = image.getexif()
        if not exif:
            return

        put_if_present(
            metadata,
            ("description", "dc:description"),
            _exif_text(exif.get(_IMAGE_DESCRIPTION)),
        )
        put_if_present(metadata, ("meta:author", "dc:creator", "creator"), _exif_text(exif.get(_ARTIST)))
        put_if_present(metadata, ("xmp:CreatorTool",), _exif_text(exif.get(_SOFTWARE)))
        put_if_present(
            metadata,
            ("Last-Modified", "dcterms:modified"),
            exif_date_to_iso(_exif_text(exif.get(_DATE_TIME))),
        )

        try:
            details = exif.get_ifd(_EXIF_IFD)
        except (KeyError, ValueError) as exc:
            logger.debug("EXIF sub-directory unreadable: %s", exc)
            return
        put_if_present(
            metadata,
            ("meta:creation-date", "dcterms:created"),
            exif_date_to_iso(_exif_text(details.get(_DATE_TIME_ORIGINAL))),
        )
