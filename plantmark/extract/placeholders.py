"""Swap diagram blocks for placeholder comments that survive Markdown rendering."""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Iterable

from plantmark.extract.models import DIAGRAM_TAG_PAIRS, DiagramBlock, TagPair

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "PlantUML:"

_UNSAFE_LABEL = re.compile(r"[^A-Za-z0-9_.]+")


def placeholder_marker(key: str) -> str:
    """Return the HTML comment that stands in for the block with this key."""
    return f"<!--- {PLACEHOLDER_PREFIX}{key} -->"


def make_block_key(start_tag: str, block_text: str) -> str:
    """Build a unique key from the block's first-line label.

    ``@startuml sequence`` yields ``sequence`` plus 8 random hex chars, so two
    blocks sharing a label (or having none) still get distinct keys.
    """
    first_line = block_text.split("\n", 1)[0].rstrip("\r")
    label = first_line.replace(start_tag, "").strip()
    label = _UNSAFE_LABEL.sub("_", label)
    return label + uuid.uuid4().hex[:8]


def _pattern(tag: TagPair) -> re.Pattern[str]:
    return re.compile(f"({re.escape(tag.start)}.*?{re.escape(tag.end)})", re.DOTALL)


def replace_with_placeholders(
    tag: TagPair, text: str, blocks: dict[str, str]
) -> str:
    """Replace every ``tag`` block in ``text`` with a placeholder marker.

    Matched blocks are recorded in ``blocks`` (key -> original text). An
    unterminated start tag is not a match and stays in the text. When
    nothing matches, ``text`` itself is returned.
    """
    parts: list[str] = []
    start = 0

    for match in _pattern(tag).finditer(text):
        block = DiagramBlock(
            key=make_block_key(tag.start, match.group(0)),
            source=match.group(0),
        )
        parts.append(text[start : match.start()])
        parts.append(placeholder_marker(block.key))
        start = match.end()
        blocks[block.key] = block.source

    if not parts:
        return text

    parts.append(text[start:])
    return "".join(parts)


def extract_blocks(
    text: str, tag_pairs: Iterable[TagPair] = DIAGRAM_TAG_PAIRS
) -> tuple[str, dict[str, str]]:
    """Run every tag pair over ``text`` in order.

    Returns the rewritten text and one map of placeholder key to block
    source shared by all diagram families.
    """
    blocks: dict[str, str] = {}
    for tag in tag_pairs:
        text = replace_with_placeholders(tag, text, blocks)
    if blocks:
        logger.debug("extracted %d diagram block(s)", len(blocks))
    return text, blocks
