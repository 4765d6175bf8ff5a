from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class RendererConfig(BaseModel):
    type: Literal["local", "remote"] = "local"
    java_path: str = "java"
    jar_path: str = "plantuml.jar"
    remote_url: str = "http://localhost:8080/"
    timeout: float = 30.0
    isolate_failures: bool = False


class MarkdownConfig(BaseModel):
    emoji: bool = True
    source_lines: bool = True
    typographer: bool = True
    language_aliases: dict[str, str] = {"c#": "csharp"}


class OutputConfig(BaseModel):
    standalone: bool = True
    title: str | None = None


class PlantmarkConfig(BaseModel):
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    markdown: MarkdownConfig = Field(default_factory=MarkdownConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
    # File the config was loaded from; None when running on defaults.
    source: Path | None = Field(default=None, exclude=True)
