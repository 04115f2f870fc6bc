"""Info command: show what ffprobe reports about a media file."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from morphit.backends.probe import MediaInfo, MediaProbe
from morphit.config import get_settings
from morphit.core.runtime import Runtime
from morphit.exceptions import ConversionError
from morphit.utils.fs import format_size

console = Console()


def _duration(seconds: float | None) -> str:
    if seconds is None:
        return "-"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    return f"{hours:d}:{minutes:02d}:{secs:05.2f}"


def _render(info: MediaInfo) -> Table:
    table = Table(title=info.path.name, show_header=True, header_style="bold")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Container", info.format_name or "-")
    table.add_row("Duration", _duration(info.duration))
    table.add_row("Bitrate", f"{info.bitrate // 1000} kb/s" if info.bitrate else "-")
    table.add_row("Size", format_size(info.path.stat().st_size))
    if info.has_video:
        table.add_row("Video", f"{info.width}x{info.height}")
    if info.has_audio:
        channels = info.channels if info.channels is not None else "?"
        table.add_row("Audio", f"{info.sample_rate} Hz, {channels} channel(s)")
    return table


def info(
    file: Annotated[
        Path,
        typer.Argument(
            help="Media file to inspect.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """Show duration, streams and bitrate of a media file."""
    runtime = Runtime.from_settings(get_settings())
    try:
        media = asyncio.run(MediaProbe(runtime).probe(file))
    except ConversionError as e:
        console.print(f"[red]Error:[/red] {e.detail}")
        raise typer.Exit(1) from e
    finally:
        runtime.close()

    console.print(_render(media))
