"""Backend option bags, validated before a job is dispatched."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from morphit.config.constants import (
    DEFAULT_CRF,
    DEFAULT_GIF_FPS,
    DEFAULT_GIF_WIDTH,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_PDF_DPI,
    DEFAULT_SPEECH_RATE,
    DEFAULT_VBR_QUALITY,
    DEFAULT_VIDEO_BITRATE,
    DEFAULT_VOICE,
    MAX_SPEECH_RATE,
    MIN_SPEECH_RATE,
)
from morphit.core.models import BackendKind, ConversionService
from morphit.exceptions import OptionsValidationError
from morphit.formats.media import ALL_SAMPLE_RATES, AUDIO_BITRATES, SAMPLE_SIZES
from morphit.formats.models import MediaFormat

Resolution = Literal["auto", "480p", "576p", "720p", "1080p", "1440p", "2160p", "4320p"]
AspectRatio = Literal["auto", "4:3", "16:9", "1:1"]
Preset = Literal[
    "ultrafast", "superfast", "veryfast", "faster", "fast", "medium", "slow", "slower", "veryslow"
]
CompressionLevel = Literal["fastest", "fast", "normal", "better", "best"]

# (width, height) per named resolution, 16:9 frames
RESOLUTIONS: dict[str, tuple[int, int]] = {
    "480p": (854, 480),
    "576p": (1024, 576),
    "720p": (1280, 720),
    "1080p": (1920, 1080),
    "1440p": (2560, 1440),
    "2160p": (3840, 2160),
    "4320p": (7680, 4320),
}

CHANNEL_COUNTS: dict[str, int] = {"mono": 1, "stereo": 2}


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class ImageOptions(_Options):
    """ImageMagick options."""

    quality: int = Field(default=DEFAULT_IMAGE_QUALITY, ge=1, le=100)
    lossy: bool = True  # False asks lossy-capable outputs (WebP) for lossless mode
    strip_exif: bool = False


class PDFOptions(_Options):
    """Rasterization options for PDF input."""

    dpi: int = Field(default=DEFAULT_PDF_DPI, ge=36, le=1200)


class AudioOptions(_Options):
    """ffmpeg audio options. None means automatic (no argument emitted)."""

    bitrate: int | None = None  # kbit/s
    channels: Literal["auto", "mono", "stereo"] = "auto"
    sample_rate: int | None = None  # Hz
    sample_size: int = 16  # bits, lossless formats only
    use_vbr: bool = False
    vbr_quality: int = Field(default=DEFAULT_VBR_QUALITY, ge=0, le=9)

    @field_validator("bitrate")
    @classmethod
    def _known_bitrate(cls, value: int | None) -> int | None:
        if value is not None and value not in AUDIO_BITRATES:
            raise ValueError(f"bitrate must be one of {AUDIO_BITRATES}")
        return value

    @field_validator("sample_rate")
    @classmethod
    def _known_sample_rate(cls, value: int | None) -> int | None:
        if value is not None and value not in ALL_SAMPLE_RATES:
            raise ValueError(f"sample rate must be one of {ALL_SAMPLE_RATES}")
        return value

    @field_validator("sample_size")
    @classmethod
    def _known_sample_size(cls, value: int) -> int:
        if value not in SAMPLE_SIZES:
            raise ValueError(f"sample size must be one of {SAMPLE_SIZES}")
        return value

    @property
    def channel_count(self) -> int | None:
        return CHANNEL_COUNTS.get(self.channels)


class GIFOptions(_Options):
    """Animated GIF options."""

    fps: int = Field(default=DEFAULT_GIF_FPS, ge=1, le=50)
    width: int = Field(default=DEFAULT_GIF_WIDTH, ge=16, le=3840)
    loop: int = Field(default=0, ge=-1)  # 0 loops forever, -1 plays once
    use_palette: bool = True


class VideoOptions(_Options):
    """ffmpeg video options."""

    resolution: Resolution = "auto"
    aspect_ratio: AspectRatio = "auto"
    quality_mode: Literal["crf", "bitrate"] = "crf"
    crf: int = Field(default=DEFAULT_CRF, ge=0, le=51)
    bitrate: str = DEFAULT_VIDEO_BITRATE  # Mbit/s; empty falls back to the default
    encoder: Literal["libx264", "libx265"] = "libx264"
    preset: Preset = "medium"
    two_pass: bool = False
    gif: GIFOptions = Field(default_factory=GIFOptions)

    @field_validator("bitrate")
    @classmethod
    def _numeric_bitrate(cls, value: str) -> str:
        value = value.strip()
        if not value:
            return value
        try:
            number = float(value)
        except ValueError:
            raise ValueError("bitrate must be a number of Mbit/s") from None
        if number <= 0:
            raise ValueError("bitrate must be positive")
        return value

    @property
    def effective_bitrate(self) -> str:
        """Bitrate argument for ``-b:v``."""
        return f"{self.bitrate or DEFAULT_VIDEO_BITRATE}M"


class ArchiveOptions(_Options):
    """Archive creation options."""

    compression_level: CompressionLevel = "normal"
    separate: bool = False
    verify: bool = True


class OCROptions(_Options):
    """Text recognition options."""

    recognition_level: Literal["fast", "accurate"] = "accurate"
    languages: list[str] = Field(default_factory=lambda: ["automatic"])
    language_correction: bool = False


class SpeechOptions(_Options):
    """Speech synthesis options."""

    voice: str = DEFAULT_VOICE
    rate: int = Field(default=DEFAULT_SPEECH_RATE, ge=MIN_SPEECH_RATE, le=MAX_SPEECH_RATE)

    @field_validator("voice")
    @classmethod
    def _non_empty_voice(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("voice must not be empty")
        return value.strip()


class ConversionOptions(_Options):
    """Every backend's options in one bag; each backend reads its own part."""

    image: ImageOptions = Field(default_factory=ImageOptions)
    pdf: PDFOptions = Field(default_factory=PDFOptions)
    audio: AudioOptions = Field(default_factory=AudioOptions)
    video: VideoOptions = Field(default_factory=VideoOptions)
    archive: ArchiveOptions = Field(default_factory=ArchiveOptions)
    ocr: OCROptions = Field(default_factory=OCROptions)
    speech: SpeechOptions = Field(default_factory=SpeechOptions)

    @classmethod
    def build(cls, data: dict[str, Any] | None = None) -> ConversionOptions:
        """Validate raw option data.

        Raises:
            OptionsValidationError: If any value is out of range or unknown
        """
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise OptionsValidationError(f"{location}: {first['msg']}", field=location) from e

    def validate_for(self, service: ConversionService) -> None:
        """Check the options against the constraints of the chosen format.

        Raises:
            OptionsValidationError: If an option is not valid for the format
        """
        if service.kind is BackendKind.MEDIA and isinstance(service.format, MediaFormat):
            if service.format.is_audio:
                _check_audio(self.audio, service.format)
            else:
                _check_video(self.video, service.format)


def _check_audio(options: AudioOptions, fmt: MediaFormat) -> None:
    name = fmt.display_name
    if fmt.lossless:
        if options.bitrate is not None:
            raise OptionsValidationError(
                f"{name} is lossless and takes no bitrate", "audio.bitrate"
            )
        if options.use_vbr:
            raise OptionsValidationError(f"{name} is lossless and takes no VBR", "audio.use_vbr")
        if options.sample_size not in fmt.sample_sizes:
            raise OptionsValidationError(
                f"{name} supports sample sizes {fmt.sample_sizes}, got {options.sample_size}",
                "audio.sample_size",
            )
    elif options.use_vbr and not fmt.supports_vbr:
        raise OptionsValidationError(f"{name} does not support VBR", "audio.use_vbr")

    if (
        options.sample_rate is not None
        and fmt.sample_rates is not None
        and options.sample_rate not in fmt.sample_rates
    ):
        raise OptionsValidationError(
            f"{name} supports sample rates {fmt.sample_rates}, got {options.sample_rate}",
            "audio.sample_rate",
        )


def _check_video(options: VideoOptions, fmt: MediaFormat) -> None:
    if fmt.id == "gif" and options.two_pass:
        raise OptionsValidationError("Two-pass encoding does not apply to GIF", "video.two_pass")
