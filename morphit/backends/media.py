"""ffmpeg-based audio and video backend."""

from __future__ import annotations

from pathlib import Path

from morphit.backends.base import IOPaths, ToolBackend
from morphit.backends.ffmpeg_args import (
    audio_codec,
    audio_option_args,
    video_codec,
    video_option_args,
)
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.core.options import ConversionOptions
from morphit.formats.models import Format, MediaFormat
from morphit.pipelines.gif import encode_gif
from morphit.pipelines.two_pass import encode_two_pass
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

log = get_logger(__name__)


class MediaBackend(ToolBackend):
    """Audio/video converter using ffmpeg.

    ffmpeg is taken from the bundled tool directory when one is configured.
    GIF output and two-pass encodes are handed to their pipelines.
    """

    kind = BackendKind.MEDIA
    tool_names = ("ffmpeg",)
    install_hint = "Install ffmpeg from https://ffmpeg.org or set MORPHIT_TOOLS__FFMPEG_DIR"
    bundled = True

    def codec_args(self, fmt: MediaFormat, options: ConversionOptions) -> list[str]:
        if fmt.is_audio:
            return audio_codec(fmt, options.audio)
        return video_codec(fmt, options.video)

    def build_args(self, fmt: Format, options: ConversionOptions, paths: IOPaths) -> list[str]:
        assert isinstance(fmt, MediaFormat)
        codec = self.codec_args(fmt, options)
        if fmt.is_audio:
            extra = audio_option_args(fmt, options.audio)
        else:
            extra = video_option_args(fmt, options.video, codec)
        return ["-i", str(paths.input), "-y", *codec, *extra, str(paths.output)]

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        source: Path = job.source
        fmt = job.service.format
        assert isinstance(fmt, MediaFormat)
        options: ConversionOptions = job.options
        output, name = self.output_for(source, fmt)
        paths = IOPaths.single(source, output)

        with self.discard_on_error(output):
            if fmt.id == "gif":
                await encode_gif(self, fmt, options.video.gif, paths, token)
            elif fmt.is_video and options.video.two_pass:
                await encode_two_pass(self, fmt, options, paths, token)
            else:
                log.info("Converting with ffmpeg", file=str(source), to=fmt.id)
                await self.invoke(fmt, options, paths, token)
        return [ConvertedArtifact((source,), output, name)]
