"""Pydantic models for diagram block extraction."""

from __future__ import annotations

from pydantic import BaseModel


class TagPair(BaseModel):
    """Start/end directives that delimit one family of diagram blocks."""

    start: str
    end: str


class DiagramBlock(BaseModel):
    """A diagram block lifted out of the document text."""

    key: str
    source: str  # full block text, tags included


# Later pairs scan text already rewritten by earlier ones.
DIAGRAM_TAG_PAIRS: tuple[TagPair, ...] = (
    TagPair(start="@startuml", end="@enduml"),
    TagPair(start="@startmindmap", end="@endmindmap"),
    TagPair(start="@startgantt", end="@endgantt"),
    TagPair(start="@startwbs", end="@endwbs"),
    TagPair(start="@startjson", end="@endjson"),
)
