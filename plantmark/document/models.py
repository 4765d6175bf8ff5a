"""Pydantic models for the document pipeline."""

from __future__ import annotations

from pydantic import BaseModel

EMPTY_RESULT = "Empty"


class RenderResult(BaseModel):
    """Outcome of one parse cycle, replaced wholesale by the next one."""

    html: str = ""
    success: bool = False
    diagrams: int = 0
