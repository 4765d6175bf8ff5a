"""Document pipeline: extract diagrams, render Markdown, substitute SVG."""

from __future__ import annotations

import asyncio
import html
import logging
from collections.abc import Callable

from plantmark.diagram.base import DiagramRenderer
from plantmark.diagram.models import ERROR_MARKER
from plantmark.document.models import EMPTY_RESULT, RenderResult
from plantmark.extract import extract_blocks, placeholder_marker
from plantmark.markdown.renderer import MarkdownRenderer, error_fragment

logger = logging.getLogger(__name__)

TextAccessor = Callable[[], "str | None"]
DiagnosticsSink = Callable[[BaseException], None]
ParsedCallback = Callable[["Document"], None]


def log_diagnostic(exc: BaseException) -> None:
    """Default diagnostics sink: log the failure with its traceback."""
    logger.error("Document parse failed: %s", exc, exc_info=exc)


class Document:
    """Renders one host document to HTML and caches the last parsed text.

    ``parse()`` is a no-op while the host text (trimmed) matches the text of
    the last successful parse. Failures never escape ``parse()``: they are
    reported to the diagnostics sink and turned into an HTML error fragment.
    """

    def __init__(
        self,
        get_text: TextAccessor,
        markdown: MarkdownRenderer,
        diagrams: DiagramRenderer,
        *,
        diagnostics: DiagnosticsSink | None = None,
        isolate_diagram_failures: bool = False,
    ) -> None:
        self.get_text = get_text
        self._markdown = markdown
        self._diagrams = diagrams
        self._diagnostics = diagnostics or log_diagnostic
        self._isolate = isolate_diagram_failures
        self._subscribers: list[ParsedCallback] = []
        self._lock = asyncio.Lock()
        self._last_text: str | None = None
        self._is_parsing = False
        self._result = RenderResult()

    @property
    def is_parsing(self) -> bool:
        return self._is_parsing

    @property
    def result(self) -> RenderResult:
        return self._result

    @property
    def parsed_result(self) -> str:
        return self._result.html

    @property
    def last_text(self) -> str | None:
        """Trimmed text of the last successful parse."""
        return self._last_text

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, callback: ParsedCallback) -> None:
        """Call ``callback(document)`` after every successful parse."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ParsedCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _emit_parsed(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:
                logger.exception("Parsed callback failed")

    def _report(self, exc: BaseException) -> None:
        try:
            self._diagnostics(exc)
        except Exception:
            logger.exception("Diagnostics sink failed")

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    async def parse(self) -> bool:
        """Run one parse cycle. Returns True when a new result was committed."""
        async with self._lock:
            self._is_parsing = True
            success = False
            text: str | None = None
            try:
                text = (self.get_text() or "").strip()
                if text == self._last_text:
                    logger.debug("text unchanged, skipping parse")
                    return False

                if not text:
                    self._result = RenderResult(html=EMPTY_RESULT, success=True)
                else:
                    self._result = await self._render(text)
                success = True
            except Exception as exc:
                self._report(exc)
                self._result = RenderResult(html=error_fragment(exc), success=False)
            finally:
                self._is_parsing = False
                if success:
                    self._last_text = text
                    self._emit_parsed()
            return success

    async def _render(self, text: str) -> RenderResult:
        rewritten, blocks = extract_blocks(text)
        body = self._markdown.convert(rewritten)

        keys = list(blocks)
        rendered = await asyncio.gather(*(self._render_block(blocks[k]) for k in keys))
        for key, markup in zip(keys, rendered):
            marker = placeholder_marker(key)
            body = body.replace(marker, markup)
            # Blocks inside code spans and code blocks come back HTML-escaped.
            body = body.replace(html.escape(marker, quote=False), markup)

        logger.info("rendered document with %d diagram(s)", len(keys))
        return RenderResult(html=body, success=True, diagrams=len(keys))

    async def _render_block(self, source: str) -> str:
        if not self._isolate:
            return await self._diagrams.render(source)
        try:
            return await self._diagrams.render(source)
        except Exception as exc:
            self._report(exc)
            return ERROR_MARKER

    async def aclose(self) -> None:
        await self._diagrams.aclose()
