"""Per-host-buffer document registry with fire-and-forget initial parse."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable

from plantmark.document.pipeline import Document, TextAccessor

logger = logging.getLogger(__name__)

DocumentFactory = Callable[[TextAccessor], Document]


class DocumentRegistry:
    """Keeps one ``Document`` per host key.

    The first lookup for a key creates the document and schedules its
    initial ``parse()`` on the running loop without awaiting it. Failures in
    that task are visible only through the document's diagnostics sink and
    its result.
    """

    def __init__(self, factory: DocumentFactory) -> None:
        self._factory = factory
        self._documents: dict[Hashable, Document] = {}
        self._tasks: set[asyncio.Task[bool]] = set()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def get_document(self, key: Hashable, get_text: TextAccessor) -> Document:
        doc = self._documents.get(key)
        if doc is None:
            doc = self._factory(get_text)
            self.spawn_parse(doc)
            self._documents[key] = doc
        return doc

    def spawn_parse(self, doc: Document) -> asyncio.Task[bool]:
        """Schedule ``doc.parse()`` and keep a reference until it finishes."""
        task = asyncio.get_running_loop().create_task(doc.parse())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def remove(self, key: Hashable) -> None:
        doc = self._documents.pop(key, None)
        if doc is not None:
            await doc.aclose()

    async def close(self) -> None:
        """Wait for pending parses, then close every document."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        for key in list(self._documents):
            await self.remove(key)
