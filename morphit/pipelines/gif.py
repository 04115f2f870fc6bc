"""Animated GIF encoding, optionally through a generated palette."""

from __future__ import annotations

from typing import TYPE_CHECKING

from morphit.backends.base import IOPaths, require_output
from morphit.core.options import GIFOptions
from morphit.formats.models import MediaFormat
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from morphit.backends.media import MediaBackend

log = get_logger(__name__)


def gif_filter(options: GIFOptions) -> str:
    return f"fps={options.fps},scale={options.width}:-1:flags=lanczos"


def single_pass_args(options: GIFOptions, paths: IOPaths) -> list[str]:
    return [
        "-i", str(paths.input), "-y",
        "-vf", gif_filter(options),
        "-loop", str(options.loop),
        str(paths.output),
    ]  # fmt: skip


def palette_args(options: GIFOptions, source: Path, palette: Path) -> list[str]:
    """Stage A: derive a 256-color palette from the source."""
    return [
        "-i", str(source), "-y",
        "-vf", f"{gif_filter(options)},palettegen",
        str(palette),
    ]  # fmt: skip


def paletteuse_args(options: GIFOptions, paths: IOPaths, palette: Path) -> list[str]:
    """Stage B: encode the animation against the palette."""
    return [
        "-i", str(paths.input),
        "-i", str(palette),
        "-y",
        "-lavfi", f"{gif_filter(options)}[x];[x][1:v]paletteuse",
        "-loop", str(options.loop),
        str(paths.output),
    ]  # fmt: skip


async def encode_gif(
    backend: MediaBackend,
    fmt: MediaFormat,
    options: GIFOptions,
    paths: IOPaths,
    token: CancellationToken | None = None,
) -> None:
    """Encode ``paths.input`` as an animated GIF.

    With ``use_palette`` the palette file is a scratch file removed after
    stage B whatever its outcome.
    """
    source = paths.input
    handle = backend.locate(source)

    if not options.use_palette:
        log.info("Encoding GIF", file=str(source), fps=options.fps, width=options.width)
        result = await backend.run(
            handle, single_pass_args(options, paths), source=source, token=token
        )
        backend.classify(result, fmt, source, paths.output)
        require_output(paths.output, source)
        return

    temp = backend.runtime.temp
    palette = temp.create_temp_file_named("palette.png")
    try:
        log.info("Generating GIF palette", file=str(source), fps=options.fps, width=options.width)
        result = await backend.run(
            handle, palette_args(options, source, palette), source=source, token=token
        )
        backend.classify(result, fmt, source)
        require_output(palette, source)

        log.info("Encoding GIF with palette", file=str(source))
        result = await backend.run(
            handle, paletteuse_args(options, paths, palette), source=source, token=token
        )
        backend.classify(result, fmt, source, paths.output)
        require_output(paths.output, source)
    finally:
        temp.remove(palette)
