"""Formats command: list the outputs available for a set of inputs."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from morphit.core.resolver import CompatibilityResolver
from morphit.formats.registry import FormatRegistry

console = Console()


def formats(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Input files; only outputs valid for all of them are listed.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """List the output formats compatible with FILES.

    Examples:
        morphit formats report.md
        morphit formats scan1.pdf scan2.pdf
    """
    resolver = CompatibilityResolver(FormatRegistry())
    sections = resolver.sections(files)

    if not sections:
        console.print("[yellow]No compatible output formats.[/yellow]")
        raise typer.Exit(1)

    for section in sections:
        table = Table(title=section.title, show_header=True, header_style="bold")
        table.add_column("Format", style="cyan")
        table.add_column("--to")
        table.add_column("--kind", style="dim")
        table.add_column("Description")
        for service in section.services:
            fmt = service.format
            table.add_row(fmt.display_name, fmt.id, service.kind.value, fmt.description or "")
        console.print(table)
