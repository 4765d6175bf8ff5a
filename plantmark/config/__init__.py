from .loader import load_config
from .models import (
    MarkdownConfig,
    OutputConfig,
    PlantmarkConfig,
    RendererConfig,
)

__all__ = [
    "MarkdownConfig",
    "OutputConfig",
    "PlantmarkConfig",
    "RendererConfig",
    "load_config",
]
