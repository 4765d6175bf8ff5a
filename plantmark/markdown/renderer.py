"""Markdown to HTML rendering on top of markdown-it-py."""

from __future__ import annotations

import html
import logging
import re
import traceback

import emoji
from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from plantmark.config.models import MarkdownConfig

logger = logging.getLogger(__name__)

ERROR_HEADER = "<p>An unexpected exception occurred:</p>"


def error_fragment(exc: BaseException) -> str:
    """Render an exception as an HTML block safe to show in place of a document."""
    details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return f"{ERROR_HEADER}<pre>{html.escape(details, quote=False)}</pre>"


def _source_lines_rule(state: StateCore) -> None:
    # Opening block tokens carry their 0-based source line for scroll sync.
    for token in state.tokens:
        if token.nesting == 1 and token.map:
            token.attrSet("data-line", str(token.map[0]))


def _emoji_rule(state: StateCore) -> None:
    for token in state.tokens:
        if token.type != "inline" or not token.children:
            continue
        for child in token.children:
            if child.type == "text" and ":" in child.content:
                child.content = emoji.emojize(child.content, language="alias")


def build_markdown_pipeline(config: MarkdownConfig) -> MarkdownIt:
    """Build the shared markdown-it parser.

    Built once and handed to every ``MarkdownRenderer``. Raw HTML stays
    enabled so placeholder comments come out verbatim.
    """
    md = MarkdownIt("commonmark", {"html": True, "typographer": config.typographer})
    md.enable("table").enable("strikethrough")
    if config.typographer:
        md.enable(["replacements", "smartquotes"])
    md.use(front_matter_plugin)
    md.use(footnote_plugin)
    md.use(deflist_plugin)
    md.use(tasklists_plugin, label=True)
    if config.source_lines:
        md.core.ruler.push("source_lines", _source_lines_rule)
    if config.emoji:
        md.core.ruler.push("emoji", _emoji_rule)
    return md


class MarkdownRenderer:
    """Renders Markdown through a shared pipeline and normalizes code labels."""

    def __init__(self, pipeline: MarkdownIt, config: MarkdownConfig) -> None:
        self._pipeline = pipeline
        self._aliases = [
            (re.compile(f'"language-{re.escape(alias)}"', re.IGNORECASE), f'"language-{canonical}"')
            for alias, canonical in config.language_aliases.items()
        ]

    def convert(self, text: str) -> str:
        """Render ``text`` to HTML. Errors propagate."""
        body = self._pipeline.render(text)
        return self.normalize_code_languages(body)

    def render(self, text: str) -> str:
        """Render ``text`` to HTML, returning an error fragment instead of raising."""
        try:
            return self.convert(text)
        except Exception as exc:
            logger.warning("Markdown rendering failed", exc_info=True)
            return error_fragment(exc)

    def normalize_code_languages(self, body: str) -> str:
        """Rewrite fence language classes to the names highlighters expect."""
        for pattern, replacement in self._aliases:
            body = pattern.sub(replacement, body)
        return body
