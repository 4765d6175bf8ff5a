"""Diagram block extraction via placeholder substitution."""

from plantmark.extract.models import DIAGRAM_TAG_PAIRS, DiagramBlock, TagPair
from plantmark.extract.placeholders import (
    PLACEHOLDER_PREFIX,
    extract_blocks,
    make_block_key,
    placeholder_marker,
    replace_with_placeholders,
)

__all__ = [
    "DIAGRAM_TAG_PAIRS",
    "DiagramBlock",
    "PLACEHOLDER_PREFIX",
    "TagPair",
    "extract_blocks",
    "make_block_key",
    "placeholder_marker",
    "replace_with_placeholders",
]
