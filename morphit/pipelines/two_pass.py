"""Two-pass video encoding."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from morphit.backends.base import IOPaths, require_output
from morphit.backends.ffmpeg_args import scale_filter, uses_x26x
from morphit.core.options import VideoOptions
from morphit.formats.models import MediaFormat
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

if TYPE_CHECKING:
    from morphit.backends.media import MediaBackend
    from morphit.core.options import ConversionOptions

log = get_logger(__name__)


def pass_args(
    options: VideoOptions, codec_args: list[str], pass_number: int, passlog: Path
) -> list[str]:
    """Rate-control and pass arguments for one pass of a two-pass encode.

    Pass 1 only gathers statistics and writes to the null muxer.
    """
    args: list[str] = []
    vf = scale_filter(options.resolution, options.aspect_ratio)
    if vf:
        args.extend(["-vf", vf])
    args.extend(["-b:v", options.effective_bitrate])
    if uses_x26x(codec_args):
        args.extend(["-preset", options.preset])
    args.extend(["-pass", str(pass_number), "-passlogfile", str(passlog)])
    if pass_number == 1:
        args.extend(["-f", "null"])
    return args


def remove_stats_logs(passlog: Path) -> int:
    """Delete every sidecar sharing the ``passlog`` prefix.

    Covers ``log-0.log``, ``log-0.log.mbtree``, x265 ``.cutree`` and the
    like. Returns the number of files removed.
    """
    removed = 0
    for sidecar in passlog.parent.glob(f"{passlog.name}*"):
        try:
            sidecar.unlink()
            removed += 1
        except FileNotFoundError:
            continue
    return removed


async def encode_two_pass(
    backend: MediaBackend,
    fmt: MediaFormat,
    options: ConversionOptions,
    paths: IOPaths,
    token: CancellationToken | None = None,
) -> None:
    """Run the analysis pass, then the real encode into ``paths.output``.

    The stats logs live in their own scratch directory, removed whatever
    the outcome of either pass.
    """
    temp = backend.runtime.temp
    log_dir = temp.create_temp_directory()
    passlog = log_dir / "log"
    source = paths.input

    try:
        handle = backend.locate(source)
        codec = backend.codec_args(fmt, options)

        log.info("Two-pass encode, pass 1", file=str(source), to=fmt.id)
        first = [
            "-i", str(source), "-y", *codec,
            *pass_args(options.video, codec, 1, passlog),
            os.devnull,
        ]  # fmt: skip
        result = await backend.run(handle, first, source=source, cwd=log_dir, token=token)
        backend.classify(result, fmt, source)

        log.info("Two-pass encode, pass 2", file=str(source), to=fmt.id)
        second = [
            "-i", str(source), "-y", *codec,
            *pass_args(options.video, codec, 2, passlog),
            str(paths.output),
        ]  # fmt: skip
        result = await backend.run(handle, second, source=source, cwd=log_dir, token=token)
        backend.classify(result, fmt, source, paths.output)
        require_output(paths.output, source)
    finally:
        removed = remove_stats_logs(passlog)
        temp.remove(log_dir)
        log.debug("Two-pass stats logs removed", count=removed)
