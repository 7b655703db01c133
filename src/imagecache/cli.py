"""Click CLI for imagecache: resize single files through the image cache."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imagecache.config.hierarchy import load_settings

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level)
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="imagecache")
def cli() -> None:
    """imagecache: cached crop, enhance and resize for media images."""


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), required=True,
              help="Output file path.")
@click.option("--width", type=int, default=None, help="Fixed output width.")
@click.option("--height", type=int, default=None, help="Fixed output height.")
@click.option("--max-width", type=int, default=None, help="Maximum output width.")
@click.option("--max-height", type=int, default=None, help="Maximum output height.")
@click.option("--quality", type=click.IntRange(0, 100), default=None, help="Encoder quality.")
@click.option("--crop", is_flag=True, default=False, help="Crop uniform borders first.")
@click.option("--cache-path", type=click.Path(file_okay=False), default=None,
              help="Cache root directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def resize(
    source: str,
    output: str,
    width: int | None,
    height: int | None,
    max_width: int | None,
    max_height: int | None,
    quality: int | None,
    crop: bool,
    cache_path: str | None,
    verbose: int,
) -> None:
    """Resize SOURCE through the cache and write the result to OUTPUT."""
    settings = load_settings(cache_path=cache_path, default_quality=quality)
    _setup_logging(verbose, settings.log_level)

    from imagecache.core import ImageProcessor
    from imagecache.items import file_modified_time
    from imagecache.types import ImageType, MediaItem

    source_path = str(Path(source).resolve())
    item = MediaItem(id=source_path, name=Path(source).name, images={ImageType.PRIMARY: source_path})
    processor = ImageProcessor(
        cache_path=settings.cache_path,
        default_quality=settings.default_quality,
        max_background_writes=settings.max_background_writes,
    )

    async def _run() -> None:
        try:
            with open(output, "wb") as sink:
                await processor.process_image(
                    item,
                    ImageType.PRIMARY,
                    0,
                    crop,
                    file_modified_time(source_path),
                    sink,
                    width=width,
                    height=height,
                    max_width=max_width,
                    max_height=max_height,
                )
        finally:
            await processor.close()

    try:
        asyncio.run(_run())
    except Exception as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Written to {output}[/green]")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
def size(source: str) -> None:
    """Print the pixel dimensions of SOURCE."""
    from imagecache.utils.image import read_dimensions

    try:
        width, height = read_dimensions(source)
    except Exception as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    console.print(f"{width}x{height}")


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--cache-path", type=click.Path(file_okay=False), default=None,
              help="Cache root directory.")
def cache_stats(cache_path: str | None) -> None:
    """Show cache statistics."""
    from imagecache.cache.manager import CacheManager

    settings = load_settings(cache_path=cache_path)
    mgr = CacheManager(settings.cache_path)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Store", style="cyan")
    table.add_column("Entries")
    table.add_column("Size (MB)")

    for name, store in mgr.stores().items():
        table.add_row(name, str(store.entry_count), f"{store.size_mb:.1f}")

    stats = mgr.stats()
    table.add_row("total", str(stats.entries), f"{stats.size_mb:.1f}")
    console.print(table)


@cache.command("clear")
@click.option("--cache-path", type=click.Path(file_okay=False), default=None,
              help="Cache root directory.")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(cache_path: str | None) -> None:
    """Clear all cached images and sizes."""
    from imagecache.cache.manager import CacheManager

    settings = load_settings(cache_path=cache_path)
    count = CacheManager(settings.cache_path).clear()
    console.print(f"[green]Cache cleared ({count} files).[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
