"""Routing entrypoint turning one uploaded document into text, pages and metadata."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time

from lxml import etree

from pagextract.extraction.adapters import build_default_adapters
from pagextract.extraction.adapters.base import FormatAdapter
from pagextract.extraction.events import feed_xhtml
from pagextract.extraction.models import ParsedDocument
from pagextract.normalization import normalize_whitespace
from pagextract.extraction.pages import PageAccumulator
from pagextract.metadata.normalizer import LanguageIdentifier, UnifiedMetadata, normalize_metadata

logger = logging.getLogger(__name__)

DEFAULT_SNIFF_BYTES = 4096


@dataclass(slots=True)
class ExtractionError(Exception):
    """Domain error for documents the parsing layer could not handle."""

    source: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (source={self.source})"


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    """Switches controlling which parts of a document are returned."""

    compress_text: bool = True
    include_raw_metadata: bool = False
    include_metadata: bool = True
    full_text: bool = True
    detect_language: bool = True


@dataclass(slots=True)
class ExtractionResult:
    """Extraction output for one document."""

    filename: str
    mimetype: str
    content: str | None = None
    raw_metadata: dict[str, str] | None = None
    metadata: UnifiedMetadata | None = None
    pages: list[str] | None = None
    elapsed_ms: int = 0

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"filename": self.filename, "mimetype": self.mimetype}
        if self.content is not None:
            payload["content"] = self.content
        if self.raw_metadata is not None:
            payload["rawmeta"] = self.raw_metadata
        if self.metadata is not None:
            payload["meta"] = self.metadata.to_dict()
        if self.pages is not None:
            payload["pages"] = self.pages
        return payload


def split_pages(xhtml: bytes, *, compress: bool = True) -> list[str]:
    """Run page-structured markup through a fresh :class:`PageAccumulator`."""

    accumulator = PageAccumulator(compress)
    feed_xhtml(xhtml, accumulator.on_event)
    return accumulator.finish()


class DocumentExtractor:
    """Resolve the right adapter and assemble the extraction result."""

    def __init__(
        self,
        options: ExtractionOptions | None = None,
        *,
        adapters: dict[str, FormatAdapter] | None = None,
        identify_language: LanguageIdentifier | None = None,
        sniff_bytes: int = DEFAULT_SNIFF_BYTES,
    ) -> None:
        self._options = options or ExtractionOptions()
        self._adapter_map: dict[str, FormatAdapter] = dict(
            build_default_adapters() if adapters is None else adapters
        )
        self._identify_language = identify_language
        self._sniff_bytes = sniff_bytes

    def register_adapter(self, name: str, adapter: FormatAdapter) -> None:
        """Register an adapter implementation by key."""

        if not name:
            raise ValueError("Adapter name cannot be empty")
        self._adapter_map[name] = adapter

    def extract(self, filename: str, payload: bytes) -> ExtractionResult:
        """Extract full text, pages and metadata from an uploaded document."""

        started = time.perf_counter()
        parsed = self._parse(filename, payload)
        options = self._options

        result = ExtractionResult(filename=filename, mimetype=parsed.mimetype)

        # paged documents only return full text on request
        if not parsed.is_paged or options.full_text:
            content = parsed.text
            if options.compress_text:
                content = normalize_whitespace(content)
            result.content = content

        if options.include_raw_metadata:
            result.raw_metadata = dict(parsed.metadata)

        if options.include_metadata:
            result.metadata = normalize_metadata(
                parsed.metadata,
                parsed.text,
                detect_language=options.detect_language,
                identify_language=self._identify_language,
            )

        if parsed.xhtml is not None:
            try:
                result.pages = split_pages(parsed.xhtml, compress=options.compress_text)
            except etree.XMLSyntaxError as exc:
                raise ExtractionError(filename, f"Page markup could not be read: {exc}") from exc

        result.elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info("Extracted %s (%s) in %dms", filename, parsed.mimetype, result.elapsed_ms)
        return result

    def _parse(self, filename: str, payload: bytes) -> ParsedDocument:
        if not payload:
            raise ExtractionError(filename, "Uploaded document is empty")

        sniffed = payload[: self._sniff_bytes]
        for name, adapter in self._adapter_map.items():
            if not adapter.supports(filename, sniffed):
                continue
            logger.debug("Parsing %s with %s adapter", filename, name)
            try:
                parsed = adapter.parse(payload, filename)
            except Exception as exc:
                raise ExtractionError(filename, f"Adapter parsing failed: {exc}") from exc
            if not isinstance(parsed, ParsedDocument):
                raise ExtractionError(filename, "Adapter returned non-canonical output")
            return parsed

        raise ExtractionError(filename, "No adapter registered for document content")
