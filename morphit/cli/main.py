"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from morphit import __version__
from morphit.cli.commands.config import config_app
from morphit.cli.commands.convert import convert
from morphit.cli.commands.formats import formats
from morphit.cli.commands.info import info

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="morphit",
    help="Convert documents, images, media, text and archives between formats.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

app.command(name="convert", help="Convert files to another format.")(convert)
app.command(name="formats", help="List the output formats available for files.")(formats)
app.command(name="info", help="Show media information via ffprobe.")(info)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]morphit[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """morphit - file format conversion through pandoc, ImageMagick, ffmpeg and friends."""
    pass


if __name__ == "__main__":
    app()
