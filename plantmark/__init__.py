"""plantmark — Markdown to HTML with embedded PlantUML diagrams."""

from plantmark.config import PlantmarkConfig, load_config
from plantmark.document import Document, DocumentRegistry, RenderResult, create_document

__version__ = "0.1.0"

__all__ = [
    "Document",
    "DocumentRegistry",
    "PlantmarkConfig",
    "RenderResult",
    "create_document",
    "load_config",
]
