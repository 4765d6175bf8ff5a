"""Diagram rendering backends."""

from plantmark.config.models import RendererConfig
from plantmark.diagram.base import DiagramRenderer
from plantmark.diagram.local import LocalDiagramRenderer
from plantmark.diagram.models import ERROR_MARKER, DiagramRenderError
from plantmark.diagram.remote import RemoteDiagramRenderer

_RENDERER_MAP: dict[str, type[DiagramRenderer]] = {
    "local": LocalDiagramRenderer,
    "remote": RemoteDiagramRenderer,
}


def create_diagram_renderer(config: RendererConfig) -> DiagramRenderer:
    """Create the diagram backend selected by ``config.type``."""
    cls = _RENDERER_MAP.get(config.type)
    if cls is None:
        raise ValueError(
            f"Unsupported renderer type: {config.type!r}. "
            f"Supported: {', '.join(_RENDERER_MAP)}"
        )
    return cls(config)


__all__ = [
    "DiagramRenderError",
    "DiagramRenderer",
    "ERROR_MARKER",
    "LocalDiagramRenderer",
    "RemoteDiagramRenderer",
    "create_diagram_renderer",
]
