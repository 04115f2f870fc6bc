"""Config command for configuration management."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from morphit.config import get_settings
from morphit.config.constants import CONFIG_LOCATIONS, DEFAULT_CONFIG_FILE

config_app = typer.Typer(help="Configuration management.")
console = Console()


@config_app.command("show")
def show() -> None:
    """Show current configuration."""
    settings = get_settings()

    console.print("\n[bold blue]Current Configuration[/bold blue]\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Directory", settings.log_dir)

    table.add_row("Output Directory", settings.output.default_dir)
    table.add_row("On Conflict", settings.output.on_conflict)

    table.add_row("Tool Search Prefixes", ", ".join(settings.tools.search_prefixes))
    table.add_row("ffmpeg Directory", settings.tools.ffmpeg_dir or "(packaged bin/ or PATH)")
    table.add_row("TeX Directories", ", ".join(settings.tools.tex_dirs))

    table.add_row("Poll Interval", f"{settings.process.poll_interval}s")
    table.add_row("Grace Period", f"{settings.process.grace_period}s")
    table.add_row("Temp Root", settings.temp.root or "(system temp dir)")

    table.add_row("Image Quality", str(settings.image.quality))
    table.add_row("PDF DPI", str(settings.image.pdf_dpi))
    table.add_row("OCR Render DPI", str(settings.ocr.render_dpi))

    console.print(table)
    console.print()


DEFAULT_CONFIG_TEMPLATE = """# morphit configuration
# Environment variables with the MORPHIT_ prefix override these values,
# e.g. MORPHIT_PROCESS__GRACE_PERIOD=2.0

log_level: "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
log_dir: ".logs"

tools:
  search_prefixes:  # Searched in order after PATH
    - "/usr/local/bin"
    - "/opt/homebrew/bin"
    - "/opt/local/bin"
    - "/usr/bin"
  # ffmpeg_dir: "/path/to/bundled/ffmpeg"  # Directory holding ffmpeg and ffprobe
  tex_dirs:
    - "/Library/TeX/texbin"

process:
  poll_interval: 0.1  # Seconds between checks after SIGINT
  grace_period: 1.0  # Seconds before escalating to SIGTERM

temp:
  root: null  # Scratch files live in <root>/morphit; null uses the system temp dir

output:
  default_dir: "output"
  on_conflict: "rename"  # skip, overwrite, rename

image:
  quality: 85  # 1-100, lossy outputs only
  pdf_dpi: 300  # Rasterization density for PDF input

ocr:
  render_dpi: 200  # Page rendering density for PDF OCR
"""


@config_app.command("init")
def init(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Path to create config file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing config file.",
        ),
    ] = False,
) -> None:
    """Initialize a configuration file."""
    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE

    if config_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists at {config_path}")
        console.print("Use --force to overwrite.")
        raise typer.Exit(1)

    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Created config file at:[/green] {config_path}")


@config_app.command("locations")
def locations() -> None:
    """Show configuration file search locations."""
    console.print("\n[bold blue]Configuration File Locations[/bold blue]\n")

    for i, loc in enumerate(CONFIG_LOCATIONS, 1):
        exists = "[green]exists[/green]" if loc.exists() else "[dim]not found[/dim]"
        console.print(f"  {i}. {loc} ({exists})")

    console.print()
    console.print("[dim]Environment variables with MORPHIT_ prefix are also supported.[/dim]")
    console.print()
