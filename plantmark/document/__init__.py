"""Document pipeline subsystem."""

from __future__ import annotations

from collections.abc import Callable

from plantmark.config.models import PlantmarkConfig
from plantmark.diagram import create_diagram_renderer
from plantmark.document.models import EMPTY_RESULT, RenderResult
from plantmark.document.pipeline import (
    DiagnosticsSink,
    Document,
    TextAccessor,
    log_diagnostic,
)
from plantmark.document.registry import DocumentRegistry
from plantmark.markdown import MarkdownRenderer, build_markdown_pipeline


def create_document(
    get_text: TextAccessor,
    config: PlantmarkConfig,
    *,
    markdown: MarkdownRenderer | None = None,
    diagnostics: DiagnosticsSink | None = None,
) -> Document:
    """Wire a ``Document`` from app-level config.

    Pass ``markdown`` to share one renderer (and its parser) between
    documents; otherwise a fresh one is built from ``config.markdown``.
    """
    if markdown is None:
        markdown = MarkdownRenderer(
            build_markdown_pipeline(config.markdown), config.markdown
        )
    return Document(
        get_text,
        markdown,
        create_diagram_renderer(config.renderer),
        diagnostics=diagnostics,
        isolate_diagram_failures=config.renderer.isolate_failures,
    )


def document_factory(
    config: PlantmarkConfig, diagnostics: DiagnosticsSink | None = None
) -> Callable[[TextAccessor], Document]:
    """Return a factory for ``DocumentRegistry`` sharing one Markdown renderer."""
    markdown = MarkdownRenderer(build_markdown_pipeline(config.markdown), config.markdown)

    def _create(get_text: TextAccessor) -> Document:
        return create_document(
            get_text, config, markdown=markdown, diagnostics=diagnostics
        )

    return _create


__all__ = [
    "Document",
    "DocumentRegistry",
    "EMPTY_RESULT",
    "RenderResult",
    "create_document",
    "document_factory",
    "log_diagnostic",
]
