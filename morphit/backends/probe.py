"""Media inspection through ffprobe."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from morphit.exceptions import ConversionError, InvocationFailedError
from morphit.utils.logging import get_logger

if TYPE_CHECKING:
    from morphit.core.runtime import Runtime

log = get_logger(__name__)

PROBE_ARGS = ["-v", "quiet", "-print_format", "json", "-show_format", "-show_streams"]


def _number(value: Any, kind: type = float) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class MediaInfo:
    """What ffprobe reports about a media file."""

    path: Path
    format_name: str | None = None
    duration: float | None = None  # seconds
    bitrate: int | None = None  # bit/s
    has_video: bool = False
    has_audio: bool = False
    sample_rate: int | None = None
    channels: int | None = None
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_probe(cls, path: Path, data: dict[str, Any]) -> MediaInfo:
        """Build from ffprobe's ``-print_format json`` document."""
        fmt = data.get("format", {})
        streams = data.get("streams", [])
        video = next((s for s in streams if s.get("codec_type") == "video"), None)
        audio = next((s for s in streams if s.get("codec_type") == "audio"), None)
        return cls(
            path=path,
            format_name=fmt.get("format_name"),
            duration=_number(fmt.get("duration")),
            bitrate=_number(fmt.get("bit_rate"), int),
            has_video=video is not None,
            has_audio=audio is not None,
            sample_rate=_number(audio.get("sample_rate"), int) if audio else None,
            channels=_number(audio.get("channels"), int) if audio else None,
            width=_number(video.get("width"), int) if video else None,
            height=_number(video.get("height"), int) if video else None,
        )


class MediaProbe:
    """Runs the bundled ffprobe under process supervision."""

    install_hint = "Install ffmpeg (which ships ffprobe) or set MORPHIT_TOOLS__FFMPEG_DIR"

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime

    async def probe(self, path: Path) -> MediaInfo:
        """Inspect ``path``.

        Raises:
            ToolNotFoundError: If ffprobe is not available
            InvocationFailedError: If ffprobe rejects the file
            ConversionError: If ffprobe's output is not valid JSON
        """
        handle = self.runtime.locator.require(
            path, "ffprobe", bundled=True, hint=self.install_hint
        )
        result = await self.runtime.runner.run(
            [str(handle.path), *PROBE_ARGS, str(path)], source=path
        )
        if not result.succeeded:
            raise InvocationFailedError(path, result.stderr, result.exit_code)
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ConversionError(path, "ffprobe returned malformed output", cause=e) from e

        info = MediaInfo.from_probe(path, data)
        log.debug("Media probed", file=str(path), format=info.format_name, duration=info.duration)
        return info
