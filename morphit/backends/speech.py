"""Speech synthesis backend (``say``, with ``espeak-ng`` as a fallback)."""

from __future__ import annotations

from pathlib import Path

from morphit.backends.base import IOPaths, ToolBackend
from morphit.config.constants import DEFAULT_VOICE
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.core.options import ConversionOptions
from morphit.exceptions import UnsupportedFormatCombinationError
from morphit.formats.models import Format, SpeechFormat
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

log = get_logger(__name__)

ESPEAK = "espeak-ng"
ESPEAK_DEFAULT_VOICE = "en"


class SpeechBackend(ToolBackend):
    """Reads text files aloud into an audio file.

    macOS ``say`` writes every catalog format. ``espeak-ng`` only writes
    WAV, so other formats fail up front when it is the only synthesizer.
    """

    kind = BackendKind.SPEECH
    tool_names = ("say", ESPEAK)
    install_hint = "Speech synthesis needs macOS 'say' or espeak-ng"

    def build_args(self, fmt: Format, options: ConversionOptions, paths: IOPaths) -> list[str]:
        assert isinstance(fmt, SpeechFormat)
        speech = options.speech
        if self.locate(paths.input).name == ESPEAK:
            if fmt.id != "wav":
                raise UnsupportedFormatCombinationError(
                    paths.input, f"{fmt.display_name} ({ESPEAK})"
                )
            # macOS voice names mean nothing to espeak-ng
            voice = ESPEAK_DEFAULT_VOICE if speech.voice == DEFAULT_VOICE else speech.voice
            return [
                "-v", voice,
                "-s", str(speech.rate),
                "-w", str(paths.output),
                "-f", str(paths.input),
            ]  # fmt: skip
        return [
            "-v", speech.voice,
            "-r", str(speech.rate),
            "-o", str(paths.output),
            *fmt.say_args,
            "-f", str(paths.input),
        ]  # fmt: skip

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        source: Path = job.source
        fmt = job.service.format
        output, name = self.output_for(source, fmt)
        log.info("Synthesizing speech", file=str(source), to=fmt.id, voice=job.options.speech.voice)
        with self.discard_on_error(output):
            await self.invoke(fmt, job.options, IOPaths.single(source, output), token)
        return [ConvertedArtifact((source,), output, name)]
