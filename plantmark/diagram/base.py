"""Abstract diagram rendering interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from plantmark.config.models import RendererConfig


class DiagramRenderer(ABC):
    """Turns one diagram block's source text into SVG markup.

    Implementations may be called concurrently for different blocks of the
    same document.
    """

    name: str = "diagram"

    def __init__(self, config: RendererConfig) -> None:
        self.config = config

    @abstractmethod
    async def render(self, source: str) -> str:
        """Render ``source`` and return the markup to embed in the page."""
        ...

    async def aclose(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> DiagramRenderer:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
