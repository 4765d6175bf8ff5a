"""CLI entry point for plantmark."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.syntax import Syntax

from plantmark.config import PlantmarkConfig, load_config
from plantmark.config.loader import DEFAULT_CONFIG_TEMPLATE
from plantmark.document import Document, DocumentRegistry, create_document, document_factory
from plantmark.output import HtmlWriter
from plantmark.watch import DocumentWatcher

app = typer.Typer(
    name="plantmark",
    help="Render Markdown with embedded PlantUML diagrams to HTML.",
)

config_app = typer.Typer(help="Manage plantmark configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: PlantmarkConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _setup_logging(config: PlantmarkConfig) -> None:
    handler = logging.StreamHandler()
    if config.log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_LOG_LEVELS[config.log_level])


def _get_config() -> PlantmarkConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to plantmark.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    _setup_logging(_config)


def _with_overrides(
    config: PlantmarkConfig, remote: str | None, jar: Path | None
) -> PlantmarkConfig:
    """Apply --remote / --jar on top of the loaded config."""
    update: dict[str, object] = {}
    if remote:
        update["type"] = "remote"
        update["remote_url"] = remote
    if jar:
        update["type"] = "local"
        update["jar_path"] = str(jar)
    if not update:
        return config
    renderer = config.renderer.model_copy(update=update)
    return config.model_copy(update={"renderer": renderer})


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


async def _render_once(doc: Document) -> None:
    try:
        await doc.parse()
    finally:
        await doc.aclose()


@app.command()
def render(
    source: Annotated[Path, typer.Argument(help="Markdown file to render")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Destination HTML file")
    ] = None,
    remote: Annotated[
        str | None, typer.Option("--remote", help="Render diagrams via this server URL")
    ] = None,
    jar: Annotated[
        Path | None, typer.Option("--jar", help="Path to plantuml.jar (local rendering)")
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Render without writing the output")
    ] = False,
) -> None:
    """Render a Markdown file with PlantUML diagrams to HTML."""
    if not source.is_file():
        rprint(f"[red]File not found:[/red] {source}")
        raise typer.Exit(code=1)

    config = _with_overrides(_get_config(), remote, jar)
    try:
        doc = create_document(lambda: _read(source), config)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    asyncio.run(_render_once(doc))

    dest = output or source.with_suffix(".html")
    written = HtmlWriter(config.output).write(
        doc.parsed_result, dest, title=source.stem, dry_run=dry_run
    )

    if not doc.result.success:
        rprint(f"[red]Rendering failed[/red], error page written to {written}")
        raise typer.Exit(code=1)

    verb = "Would write" if dry_run else "Wrote"
    rprint(f"[green]{verb}[/green] {written} ({doc.result.diagrams} diagram(s))")


async def _watch(source: Path, dest: Path, config: PlantmarkConfig) -> None:
    loop = asyncio.get_running_loop()
    writer = HtmlWriter(config.output)

    def _on_parsed(doc: Document) -> None:
        writer.write(doc.parsed_result, dest, title=source.stem)
        rprint(f"[green]Updated[/green] {dest} ({doc.result.diagrams} diagram(s))")

    def _on_error(exc: BaseException) -> None:
        rprint(f"[red]Render failed:[/red] {exc}")

    registry = DocumentRegistry(document_factory(config, diagnostics=_on_error))
    # Subscribe before the first parse task gets a chance to run.
    doc = registry.get_document(source.resolve(), lambda: _read(source))
    doc.subscribe(_on_parsed)

    def _on_change(_path: Path) -> None:
        loop.call_soon_threadsafe(registry.spawn_parse, doc)

    watcher = DocumentWatcher(source, _on_change)
    watcher.start()
    try:
        await asyncio.Event().wait()
    finally:
        watcher.stop()
        await registry.close()


@app.command()
def watch(
    source: Annotated[Path, typer.Argument(help="Markdown file to watch")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Destination HTML file")
    ] = None,
    remote: Annotated[
        str | None, typer.Option("--remote", help="Render diagrams via this server URL")
    ] = None,
    jar: Annotated[
        Path | None, typer.Option("--jar", help="Path to plantuml.jar (local rendering)")
    ] = None,
) -> None:
    """Re-render a Markdown file every time it changes."""
    if not source.is_file():
        rprint(f"[red]File not found:[/red] {source}")
        raise typer.Exit(code=1)

    config = _with_overrides(_get_config(), remote, jar)
    dest = output or source.with_suffix(".html")
    rprint(f"Watching [cyan]{source}[/cyan] -> {dest} (Ctrl+C to stop)")
    try:
        asyncio.run(_watch(source, dest, config))
    except KeyboardInterrupt:
        rprint("Stopped.")
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


# ── config subcommands ─────────────────────────────────────────────


@config_app.command("init")
def config_init(
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Write a default plantmark.yaml in the current directory."""
    dest = Path("plantmark.yaml")
    if dest.exists() and not force:
        rprint(f"[yellow]{dest} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(code=1)
    dest.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {dest}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    config = _get_config()
    origin = config.source or "defaults (no config file found)"
    rprint(f"# from {origin}")
    text = yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False)
    rprint(Syntax(text, "yaml"))
