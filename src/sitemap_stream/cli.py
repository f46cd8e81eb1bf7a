"""CLI interface using typer."""

import asyncio
import json
import logging
from pathlib import Path

import typer

from .config import load_settings
from .errors import InvalidConfigError, InvalidEntryError, SitemapError
from .events import IndexCreated, SegmentCreated
from .stream import SitemapStream

app = typer.Typer(
    name="sitemap-stream",
    help="Stream URLs into size-capped sitemap files and a sitemap index",
    no_args_is_help=True,
)


def read_entries(path: Path):
    """Yield entries from a file: one location per line, or one JSON object per line."""
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("{"):
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as e:
                    raise InvalidEntryError(f"line {line_no}: {e}") from e
            else:
                yield line


async def _generate(stream: SitemapStream, input_path: Path) -> dict:
    """Inject every entry, honouring backpressure, then build the index."""
    created: list[str] = []
    stream.on(SegmentCreated, lambda event: created.append(event.location))
    stream.on(IndexCreated, lambda event: created.append(event.location))

    paused = 0
    for entry in read_entries(input_path):
        if not stream.inject(entry):
            paused += 1
            await stream.wait_for_drain()

    document = stream.done()
    finalized = await stream.join()

    return {
        "entries": stream.injected_count,
        "segments": len(document.entries),
        "finalized": finalized,
        "paused": paused,
        "files": created,
    }


@app.command()
def generate(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File with one URL or JSON record per line"),
    limit: int = typer.Option(50000, "--limit", "-l", help="Maximum entries per sitemap file"),
    output_base: str = typer.Option("./", "--output", "-o", help="Output path prefix"),
    index_base_url: str = typer.Option("", "--index-base-url", "-u", help="Base URL of the sitemap files, used in the index"),
    timestamp: str = typer.Option(None, "--timestamp", help="ISO-8601 lastmod for every entry (default: now)"),
    mobile: bool = typer.Option(False, "--mobile", help="Mark every entry as a mobile page"),
    compress: bool = typer.Option(True, "--compress/--no-compress", help="Gzip every output file"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only print created files"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log segment rotation and finalization"),
):
    """Generate sitemap files and a sitemap index from a list of URLs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {
        "limit": limit,
        "output_base": output_base,
        "index_base_url": index_base_url,
        "mobile_enabled": mobile,
        "compression_enabled": compress,
    }
    if timestamp:
        overrides["timestamp"] = timestamp

    try:
        settings = load_settings(**overrides)
    except InvalidConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(2)

    async def run() -> dict:
        return await _generate(SitemapStream(settings), input_file)

    try:
        result = asyncio.run(run())
    except SitemapError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not quiet:
        typer.echo(f"Entries: {result['entries']}")
        typer.echo(f"Sitemaps: {result['segments']}")
        typer.echo(f"Files finalized: {result['finalized']}")
        if result["paused"]:
            typer.echo(f"Backpressure pauses: {result['paused']}")
        typer.echo("---")
    for location in result["files"]:
        typer.echo(location)


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"sitemap-stream {__version__}")


if __name__ == "__main__":
    app()
