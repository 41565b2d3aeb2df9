"""Structural markup events and the XHTML bridge that produces them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Union

from lxml import etree


@dataclass(frozen=True, slots=True)
class ElementOpen:
    tag_name: str
    attributes: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Characters:
    text: str


@dataclass(frozen=True, slots=True)
class ElementClose:
    tag_name: str


StructuralEvent = Union[ElementOpen, Characters, ElementClose]
EventSink = Callable[[StructuralEvent], None]


class _EventTarget:
    """lxml parser target forwarding callbacks to an event sink."""

    def __init__(self, sink: EventSink) -> None:
        self._sink = sink

    def start(self, tag: str, attrib: Mapping[str, str]) -> None:
        self._sink(ElementOpen(tag_name=tag, attributes=dict(attrib)))

    def end(self, tag: str) -> None:
        self._sink(ElementClose(tag_name=tag))

    def data(self, data: str) -> None:
        if data:
            self._sink(Characters(text=data))

    def close(self) -> None:
        return None


def feed_xhtml(payload: bytes, sink: EventSink) -> None:
    """Parse XHTML markup and push its events to *sink* in document order.

    Tag names are delivered in Clark notation (``{namespace}local``) when the
    markup declares a namespace. Syntax errors propagate as
    :class:`lxml.etree.XMLSyntaxError`.
    """

    parser = etree.XMLParser(
        target=_EventTarget(sink),
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
    )
    etree.fromstring(payload, parser=parser)
