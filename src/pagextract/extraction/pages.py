"""Page reconstruction from a stream of structural markup events.

The parsing engine renders every page of a paged document as a container
element carrying a marker attribute (``<div class="page">`` in XHTML output).
:class:`PageAccumulator` is pushed the engine's events one by one and collects
the character data seen inside each marked container into a numbered page.

Pages are numbered by a counter that advances on every page open, so the
numbering is dense and starts at 1 no matter what identifiers the markup
carries. Text is only stored when the container closes; a page that is opened
but never closed still occupies its slot in the output as an empty string.
"""

from __future__ import annotations

import logging

from pagextract.extraction.events import Characters, ElementClose, ElementOpen, StructuralEvent
from pagextract.normalization import normalize_whitespace

logger = logging.getLogger(__name__)

DEFAULT_PAGE_TAG = "div"
DEFAULT_MARKER_ATTRIBUTE = "class"
DEFAULT_MARKER_VALUE = "page"


class PageAccumulator:
    """Collect per-page text from structural events of one document.

    Instances own their buffer, counter and page table; create one per
    document and discard it after :meth:`finish`.
    """

    def __init__(
        self,
        compress: bool = True,
        *,
        page_tag: str = DEFAULT_PAGE_TAG,
        marker_attribute: str = DEFAULT_MARKER_ATTRIBUTE,
        marker_value: str = DEFAULT_MARKER_VALUE,
    ) -> None:
        self._compress = compress
        self._page_tag = page_tag
        self._marker_attribute = marker_attribute
        self._marker_value = marker_value
        self._buffer: list[str] | None = None
        self._page_number = 0
        self._pages: dict[int, str] = {}

    @property
    def page_number(self) -> int:
        """Number of page opens observed so far."""

        return self._page_number

    def on_event(self, event: StructuralEvent) -> None:
        """Consume one event in document order."""

        if isinstance(event, Characters):
            self._characters(event.text)
        elif isinstance(event, ElementOpen):
            if self._is_page_tag(event.tag_name) and self._is_page_marker(event):
                self._start_page()
        elif isinstance(event, ElementClose):
            if self._is_page_tag(event.tag_name):
                self._end_page()

    def finish(self) -> list[str]:
        """Return page texts ordered 1..N with gaps rendered as empty strings."""

        return [self._pages.get(index, "") for index in range(1, self._page_number + 1)]

    def _is_page_tag(self, tag_name: str) -> bool:
        # suffix match accepts prefixed (xhtml:div) and Clark ({ns}div) names
        return tag_name.endswith(self._page_tag)

    def _is_page_marker(self, event: ElementOpen) -> bool:
        return event.attributes.get(self._marker_attribute) == self._marker_value

    def _characters(self, text: str) -> None:
        if text and self._buffer is not None:
            self._buffer.append(text)

    def _start_page(self) -> None:
        self._page_number += 1
        self._buffer = []
        logger.debug("Page %d opened", self._page_number)

    def _end_page(self) -> None:
        if self._buffer is None:
            # close seen before any page opened
            return

        page = "".join(self._buffer)
        if self._compress:
            page = normalize_whitespace(page)

        existing = self._pages.get(self._page_number)
        if existing is not None:
            page = f"{existing} {page}".strip()

        self._pages[self._page_number] = page
        self._buffer = []
