"""Canonical data structures shared by all format adapters."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ParsedDocument:
    """Raw parser output for one uploaded document."""

    mimetype: str
    text: str
    metadata: dict[str, str] = field(default_factory=dict)
    xhtml: bytes | None = None

    @property
    def is_paged(self) -> bool:
        """True when page-structured markup is available for page splitting."""

        return self.xhtml is not None
