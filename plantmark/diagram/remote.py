"""Remote PlantUML backend: POSTs diagram source to a rendering service."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from plantmark.config.models import RendererConfig
from plantmark.diagram.base import DiagramRenderer
from plantmark.diagram.models import ERROR_MARKER, DiagramRenderError

logger = logging.getLogger(__name__)

RENDER_PATH = "RenderFromPlain"
_CONTENT_TYPE = "text/plain; charset=utf-8"


def validate_remote_url(url: str) -> str:
    """Reject remote URLs that are not http(s) or carry CR/LF characters."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"remote_url must be http(s), got {parsed.scheme!r}")
    if "\r" in url or "\n" in url:
        raise ValueError("CRLF injection detected in remote_url")
    return url


class RemoteDiagramRenderer(DiagramRenderer):
    """Renders through an HTTP service that accepts plain-text PlantUML.

    A single pooled ``httpx.AsyncClient`` bound to ``remote_url`` is created
    on first use and reused for every block until ``aclose()``.
    """

    name = "remote"

    def __init__(
        self, config: RendererConfig, client: httpx.AsyncClient | None = None
    ) -> None:
        super().__init__(config)
        self._base_url = validate_remote_url(config.remote_url)
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url, timeout=self.config.timeout
            )
        return self._client

    async def render(self, source: str) -> str:
        try:
            resp = await self.client.post(
                RENDER_PATH,
                content=source.encode("utf-8"),
                headers={"Content-Type": _CONTENT_TYPE},
            )
        except httpx.HTTPError as exc:
            raise DiagramRenderError(self.name, exc) from exc

        if not resp.is_success:
            logger.warning(
                "Remote renderer returned HTTP %d for %s", resp.status_code, resp.url
            )
            return ERROR_MARKER
        return resp.text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
