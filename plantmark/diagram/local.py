"""Local PlantUML backend: runs the PlantUML jar as a subprocess."""

from __future__ import annotations

import asyncio
import logging

from plantmark.diagram.base import DiagramRenderer
from plantmark.diagram.models import DiagramRenderError

logger = logging.getLogger(__name__)


def extract_error_details(stderr_text: str) -> str:
    """Parse PlantUML stderr into a readable message."""
    raw = (stderr_text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.strip() for line in raw.split("\n") if line.strip()]
    if not lines:
        return "unknown error"

    # PlantUML reports syntax errors as: ERROR / <line-number> / <message>
    if len(lines) >= 3 and lines[0].upper() == "ERROR" and lines[1].isdigit():
        return f"line {lines[1]}: {lines[2]}"

    return "\n".join(lines[:8])


class LocalDiagramRenderer(DiagramRenderer):
    """Pipes diagram source through ``java -jar plantuml.jar -pipe -tsvg``."""

    name = "local"

    def command(self) -> list[str]:
        return [
            self.config.java_path,
            "-Djava.awt.headless=true",
            "-jar",
            self.config.jar_path,
            "-pipe",
            "-tsvg",
            "-charset",
            "UTF-8",
        ]

    async def render(self, source: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise DiagramRenderError(self.name, exc) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(source.encode("utf-8")),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as exc:
            await _kill(proc)
            raise DiagramRenderError(
                self.name, f"timed out after {self.config.timeout}s"
            ) from exc
        except BaseException:
            # Cancelled: the java child must not outlive the task.
            await _kill(proc)
            raise

        if proc.returncode != 0:
            details = extract_error_details(stderr.decode("utf-8", errors="replace"))
            raise DiagramRenderError(self.name, details)

        try:
            svg = stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DiagramRenderError(self.name, exc) from exc
        logger.debug("rendered diagram locally (%d bytes)", len(stdout))
        return svg


async def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass
    await proc.wait()
