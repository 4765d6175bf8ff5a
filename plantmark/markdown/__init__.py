"""Markdown rendering subsystem."""

from plantmark.markdown.renderer import (
    ERROR_HEADER,
    MarkdownRenderer,
    build_markdown_pipeline,
    error_fragment,
)

__all__ = [
    "ERROR_HEADER",
    "MarkdownRenderer",
    "build_markdown_pipeline",
    "error_fragment",
]
