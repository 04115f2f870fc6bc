"""Convert command: run a batch and save its artifacts."""

import asyncio
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from morphit.config import MorphitSettings, get_settings
from morphit.core.batch import BatchConverter
from morphit.core.models import BackendKind, BatchResult, ConversionService
from morphit.core.options import ConversionOptions
from morphit.core.resolver import CompatibilityResolver
from morphit.core.runtime import Runtime
from morphit.exceptions import ConversionError, OptionsValidationError
from morphit.utils.fs import ensure_directory, format_size
from morphit.utils.logging import get_logger, setup_task_logging

console = Console()
log = get_logger(__name__)


def build_options(values: dict[str, Any]) -> ConversionOptions:
    """Turn ``section.field`` keyed CLI values into validated options.

    None values are left out so the option defaults apply.

    Raises:
        OptionsValidationError: If a value is out of range
    """
    data: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        target = data
        *sections, field = key.split(".")
        for section in sections:
            target = target.setdefault(section, {})
        target[field] = value
    return ConversionOptions.build(data)


def convert(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Input files, converted in the given order.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    to: Annotated[
        str,
        typer.Option("--to", "-t", help="Output format id or extension (see `morphit formats`)."),
    ],
    kind: Annotated[
        BackendKind | None,
        typer.Option("--kind", "-k", help="Backend kind, when the format is ambiguous."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for converted files.",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = None,
    on_conflict: Annotated[
        str | None,
        typer.Option("--on-conflict", help="skip, overwrite or rename existing outputs."),
    ] = None,
    quality: Annotated[
        int | None, typer.Option("--quality", help="Image quality for lossy outputs (1-100).")
    ] = None,
    lossless: Annotated[
        bool, typer.Option("--lossless", help="Lossless mode for lossy-capable images.")
    ] = False,
    strip_exif: Annotated[
        bool, typer.Option("--strip-exif", help="Remove EXIF metadata, keeping orientation.")
    ] = False,
    dpi: Annotated[int | None, typer.Option("--dpi", help="Density for PDF input.")] = None,
    audio_bitrate: Annotated[
        int | None, typer.Option("--audio-bitrate", help="Audio bitrate in kbit/s.")
    ] = None,
    channels: Annotated[
        str | None, typer.Option("--channels", help="auto, mono or stereo.")
    ] = None,
    sample_rate: Annotated[
        int | None, typer.Option("--sample-rate", help="Audio sample rate in Hz.")
    ] = None,
    sample_size: Annotated[
        int | None, typer.Option("--sample-size", help="Bits per sample (lossless audio).")
    ] = None,
    vbr: Annotated[
        int | None, typer.Option("--vbr", help="Variable bitrate quality 0-9 (MP3).")
    ] = None,
    resolution: Annotated[
        str | None, typer.Option("--resolution", help="auto, 480p ... 4320p.")
    ] = None,
    aspect_ratio: Annotated[
        str | None, typer.Option("--aspect-ratio", help="auto, 4:3, 16:9 or 1:1.")
    ] = None,
    crf: Annotated[int | None, typer.Option("--crf", help="Constant rate factor (0-51).")] = None,
    video_bitrate: Annotated[
        str | None,
        typer.Option("--video-bitrate", help="Video bitrate in Mbit/s; switches to bitrate mode."),
    ] = None,
    encoder: Annotated[
        str | None, typer.Option("--encoder", help="libx264 or libx265.")
    ] = None,
    preset: Annotated[str | None, typer.Option("--preset", help="x264/x265 preset.")] = None,
    two_pass: Annotated[
        bool, typer.Option("--two-pass", help="Two-pass video encoding.")
    ] = False,
    gif_fps: Annotated[int | None, typer.Option("--gif-fps", help="GIF frame rate.")] = None,
    gif_width: Annotated[int | None, typer.Option("--gif-width", help="GIF width.")] = None,
    no_palette: Annotated[
        bool, typer.Option("--no-palette", help="Skip the GIF palette pass.")
    ] = False,
    compression: Annotated[
        str | None,
        typer.Option("--compression", help="Archive level: fastest, fast, normal, better, best."),
    ] = None,
    separate: Annotated[
        bool, typer.Option("--separate", help="One archive per input file.")
    ] = False,
    no_verify: Annotated[
        bool, typer.Option("--no-verify", help="Skip the archive integrity check.")
    ] = False,
    language: Annotated[
        list[str] | None, typer.Option("--language", "-l", help="OCR language (repeatable).")
    ] = None,
    fast_ocr: Annotated[
        bool, typer.Option("--fast-ocr", help="Fast OCR recognition level.")
    ] = False,
    voice: Annotated[str | None, typer.Option("--voice", help="Speech voice.")] = None,
    rate: Annotated[
        int | None, typer.Option("--rate", help="Speech rate in words per minute (120-300).")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """Convert FILES to another format.

    Examples:
        morphit convert report.md --to pdf
        morphit convert clip.mov --to mp4 --two-pass --crf 20
        morphit convert a.txt b.txt --to zip --separate -o ./archives
    """
    settings = get_settings()
    task_id, log_path = setup_task_logging(
        log_dir=settings.log_dir,
        prefix="convert",
        verbose=verbose,
    )
    if verbose:
        log.info("Logs will be saved to", log_file=str(log_path))
    log.info("Task Configuration", task_id=task_id, config=settings.model_dump())

    if on_conflict is not None and on_conflict not in ("skip", "overwrite", "rename"):
        console.print(f"[red]Error:[/red] Invalid conflict strategy '{on_conflict}'")
        raise typer.Exit(1)

    runtime = Runtime.from_settings(settings)
    resolver = CompatibilityResolver(runtime.registry)
    try:
        service = resolver.find(files, to, kind)
        options = build_options(
            {
                "image.quality": quality if quality is not None else settings.image.quality,
                "image.lossy": False if lossless else None,
                "image.strip_exif": strip_exif or None,
                "pdf.dpi": dpi if dpi is not None else settings.image.pdf_dpi,
                "audio.bitrate": audio_bitrate,
                "audio.channels": channels,
                "audio.sample_rate": sample_rate,
                "audio.sample_size": sample_size,
                "audio.use_vbr": True if vbr is not None else None,
                "audio.vbr_quality": vbr,
                "video.resolution": resolution,
                "video.aspect_ratio": aspect_ratio,
                "video.crf": crf,
                "video.quality_mode": "bitrate" if video_bitrate is not None else None,
                "video.bitrate": video_bitrate,
                "video.encoder": encoder,
                "video.preset": preset,
                "video.two_pass": two_pass or None,
                "video.gif.fps": gif_fps,
                "video.gif.width": gif_width,
                "video.gif.use_palette": False if no_palette else None,
                "archive.compression_level": compression,
                "archive.separate": separate or None,
                "archive.verify": False if no_verify else None,
                "ocr.languages": language or None,
                "ocr.recognition_level": "fast" if fast_ocr else None,
                "speech.voice": voice,
                "speech.rate": rate,
            }
        )
        options.validate_for(service)
    except (ConversionError, OptionsValidationError) as e:
        runtime.close()
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    output_dir = ensure_directory(output or settings.get_output_dir())
    log.info(
        "Starting conversion",
        files=len(files),
        service=str(service),
        output_dir=str(output_dir),
    )

    runtime.processes.install_signal_handlers()
    try:
        _execute(runtime, files, service, options, output_dir, on_conflict, settings, verbose)
    except KeyboardInterrupt:
        log.warning("Task Interrupted by KeyboardInterrupt", task_id=task_id)
        console.print("\n[yellow]Interrupted. Exiting...[/yellow]")
        raise typer.Exit(130) from None
    finally:
        runtime.processes.uninstall_signal_handlers()
        runtime.close()


def _execute(
    runtime: Runtime,
    files: list[Path],
    service: ConversionService,
    options: ConversionOptions,
    output_dir: Path,
    on_conflict: str | None,
    settings: MorphitSettings,
    verbose: bool,
) -> None:
    """Run the batch, save what it produced and report."""
    converter = BatchConverter(runtime)

    if verbose:
        result = asyncio.run(converter.convert_batch(files, service, options))
    else:
        result = _run_with_progress(converter, files, service, options)

    saved: list[tuple[Path, int]] = []
    for artifact in result.artifacts:
        try:
            path = converter.save(artifact, output_dir, on_conflict or settings.output.on_conflict)
        except ConversionError as e:
            converter.discard(artifact)
            console.print(f"[yellow]Skipped:[/yellow] {e.detail}")
            continue
        saved.append((path, path.stat().st_size))

    if saved:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Output", style="cyan")
        table.add_column("Size", justify="right")
        for path, size in saved:
            table.add_row(str(path), format_size(size))
        console.print(table)

    if result.error is None:
        log.info("Task Completed Successfully", outputs=len(saved))
        console.print(f"[bold green]Conversion completed![/bold green] {len(saved)} file(s)")
        return

    if result.cancelled:
        log.warning("Task Cancelled", error=str(result.error))
        console.print("[yellow]Conversion cancelled.[/yellow]")
        raise typer.Exit(130)

    log.error("Task Failed", error=str(result.error))
    console.print(f"[bold red]Conversion failed:[/bold red] {result.error}")
    raise typer.Exit(1)


def _run_with_progress(
    converter: BatchConverter,
    files: list[Path],
    service: ConversionService,
    options: ConversionOptions,
) -> BatchResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Converting to {service.display_name}...", total=None)

        def on_progress(current: int, total: int) -> None:
            progress.update(task, completed=current - 1, total=total)

        result = asyncio.run(
            converter.convert_batch(files, service, options, progress=on_progress)
        )
        progress.update(task, completed=len(result.jobs))
    return result
