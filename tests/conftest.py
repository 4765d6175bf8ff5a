"""Shared test fixtures for plantmark."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from plantmark.config.models import MarkdownConfig, PlantmarkConfig
from plantmark.diagram.base import DiagramRenderer
from plantmark.document.pipeline import Document
from plantmark.markdown.renderer import MarkdownRenderer, build_markdown_pipeline

STUB_SVG = "<svg>OK</svg>"


@pytest.fixture
def sample_config():
    return PlantmarkConfig()


@pytest.fixture
def markdown_config():
    return MarkdownConfig()


@pytest.fixture
def markdown_renderer(markdown_config):
    return MarkdownRenderer(build_markdown_pipeline(markdown_config), markdown_config)


@pytest.fixture
def stub_diagrams():
    """Diagram backend that returns fixed SVG for every block."""
    renderer = MagicMock(spec=DiagramRenderer)
    renderer.render = AsyncMock(return_value=STUB_SVG)
    renderer.aclose = AsyncMock()
    return renderer


@pytest.fixture
def make_document(markdown_renderer, stub_diagrams):
    """Build a Document over a mutable text holder: doc, holder = make_document("...")."""

    def _make(text="", **kwargs):
        holder = {"text": text}
        kwargs.setdefault("markdown", markdown_renderer)
        kwargs.setdefault("diagrams", stub_diagrams)
        doc = Document(lambda: holder["text"], **kwargs)
        return doc, holder

    return _make
