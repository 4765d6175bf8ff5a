"""Config file discovery and loading.

A config file may reference environment variables as ``${VAR}``. A relative
``renderer.jar_path`` written in a file is taken relative to that file (``~``
is expanded), so a project can keep ``plantuml.jar`` next to its
``plantmark.yaml`` and render from any working directory.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import PlantmarkConfig

logger = logging.getLogger(__name__)

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def config_search_path(cli_path: str | None = None) -> list[Path]:
    """Files consulted by ``load_config``, highest priority first."""
    paths = [Path("plantmark.yaml"), Path.home() / ".plantmark" / "config.yaml"]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return paths


def load_config(cli_path: str | None = None) -> PlantmarkConfig:
    """Load the first non-empty config file, or defaults if there is none.

    An explicit ``cli_path`` must exist. The returned config records the file
    it came from in ``source``.
    """
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_search_path(cli_path):
        if not path.is_file():
            continue
        raw = _read_yaml(path)
        if raw is None:
            logger.debug("Skipping empty config file %s", path)
            continue
        config = _build_config(_expand_env_vars(raw), path)
        logger.debug("Loaded config from %s", config.source)
        return config

    logger.debug("No config file found, using defaults")
    return PlantmarkConfig()


def _read_yaml(path: Path) -> dict[str, Any] | None:
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping at top level")
    return raw


def _build_config(raw: dict[str, Any], path: Path) -> PlantmarkConfig:
    try:
        config = PlantmarkConfig(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e

    source = path.resolve()
    renderer = raw.get("renderer") or {}
    if "jar_path" in renderer:
        jar = _resolve_relative(config.renderer.jar_path, source.parent)
        config.renderer = config.renderer.model_copy(update={"jar_path": jar})
    config.source = source
    return config


def _resolve_relative(value: str, base: Path) -> str:
    """Anchor a relative path at ``base``; leave blanks and absolute paths alone."""
    if not value:
        return value
    path = Path(value).expanduser()
    if path.is_absolute():
        return str(path)
    return str(base / path)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} references in strings; unset vars become ""."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `plantmark config init`
DEFAULT_CONFIG_TEMPLATE = """\
# plantmark.yaml

# Diagram rendering backend
renderer:
  type: "local"                # local | remote
  java_path: "java"            # used by the local backend
  jar_path: "plantuml.jar"     # relative to this file; or ${PLANTUML_JAR}
  remote_url: "http://localhost:8080/"
  timeout: 30                  # seconds, per diagram
  isolate_failures: false      # true: a failing diagram renders as "Error"

# Markdown rendering
markdown:
  emoji: true
  source_lines: true           # data-line attributes on block elements
  typographer: true
  language_aliases:
    "c#": "csharp"

# Output
output:
  standalone: true             # wrap the fragment in a full HTML page
  # title: "My document"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
