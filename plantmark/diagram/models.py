"""Errors raised by diagram rendering backends."""

from __future__ import annotations

ERROR_MARKER = "Error"


class DiagramRenderError(Exception):
    """Wraps backend-specific failures with the backend name."""

    def __init__(self, backend: str, cause: Exception | str) -> None:
        self.backend = backend
        super().__init__(f"{backend} diagram render failed: {cause}")
        if isinstance(cause, Exception):
            self.__cause__ = cause
