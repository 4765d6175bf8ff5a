"""HtmlWriter — writes rendered documents to disk."""

from __future__ import annotations

import html
import logging
from pathlib import Path

from plantmark.config.models import OutputConfig

logger = logging.getLogger(__name__)

_PAGE_TEMPLATE = """\
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


class HtmlWriter:
    """Writes rendered HTML fragments, optionally wrapped in a standalone page."""

    def __init__(self, config: OutputConfig) -> None:
        self.config = config

    def page(self, body: str, title: str) -> str:
        if not self.config.standalone:
            return body
        return _PAGE_TEMPLATE.format(
            title=html.escape(self.config.title or title), body=body
        )

    def write(
        self, body: str, dest: str | Path, title: str = "", *, dry_run: bool = False
    ) -> Path:
        """Write ``body`` to ``dest``. Returns the (would-be) written path."""
        dest = Path(dest)
        content = self.page(body, title or dest.stem)

        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(content, encoding="utf-8")
        logger.info("wrote %s (%d bytes)", dest, len(content))
        return dest
