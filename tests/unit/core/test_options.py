"""Tests for conversion options."""

import pytest

from morphit.core.models import BackendKind, ConversionService
from morphit.core.options import ConversionOptions
from morphit.exceptions import OptionsValidationError
from morphit.formats.image import IMAGE_FORMATS
from morphit.formats.media import MEDIA_FORMATS


def _media(format_id: str) -> ConversionService:
    return ConversionService(BackendKind.MEDIA, MEDIA_FORMATS[format_id])


class TestBuild:
    """Tests for ConversionOptions.build."""

    def test_defaults(self):
        """An empty bag takes every default."""
        options = ConversionOptions.build()
        assert options.image.quality == 85
        assert options.video.encoder == "libx264"
        assert options.archive.compression_level == "normal"
        assert options.archive.verify is True
        assert options.audio.channel_count is None

    def test_nested_values(self):
        """Nested dicts populate the matching section."""
        options = ConversionOptions.build(
            {"video": {"gif": {"fps": 24}}, "audio": {"channels": "mono"}}
        )
        assert options.video.gif.fps == 24
        assert options.audio.channel_count == 1

    def test_out_of_range_reports_field(self):
        """Pydantic errors are turned into OptionsValidationError with a field path."""
        with pytest.raises(OptionsValidationError) as exc_info:
            ConversionOptions.build({"image": {"quality": 0}})
        assert exc_info.value.field == "image.quality"

    def test_unknown_key_rejected(self):
        """Unknown option names are errors, not silently ignored."""
        with pytest.raises(OptionsValidationError):
            ConversionOptions.build({"image": {"sharpness": 3}})

    def test_unknown_bitrate_rejected(self):
        """Audio bitrates must come from the fixed list."""
        with pytest.raises(OptionsValidationError, match="bitrate"):
            ConversionOptions.build({"audio": {"bitrate": 100}})

    def test_speech_rate_bounds(self):
        """Speech rate is clamped to 120-300 words per minute."""
        with pytest.raises(OptionsValidationError):
            ConversionOptions.build({"speech": {"rate": 400}})
        assert ConversionOptions.build({"speech": {"rate": 120}}).speech.rate == 120

    def test_blank_voice_rejected(self):
        """An all-whitespace voice is invalid."""
        with pytest.raises(OptionsValidationError):
            ConversionOptions.build({"speech": {"voice": "  "}})

    def test_video_bitrate_must_be_numeric(self):
        """Video bitrate is a number of Mbit/s."""
        with pytest.raises(OptionsValidationError):
            ConversionOptions.build({"video": {"bitrate": "fast"}})

    def test_empty_video_bitrate_uses_default(self):
        """An empty bitrate falls back to the default."""
        options = ConversionOptions.build({"video": {"bitrate": ""}})
        assert options.video.effective_bitrate.endswith("M")
        assert options.video.effective_bitrate != "M"


class TestValidateFor:
    """Tests for per-format validation."""

    def test_lossless_rejects_bitrate(self):
        """FLAC takes no bitrate."""
        options = ConversionOptions.build({"audio": {"bitrate": 192}})
        with pytest.raises(OptionsValidationError) as exc_info:
            options.validate_for(_media("flac"))
        assert exc_info.value.field == "audio.bitrate"

    def test_lossless_sample_size(self):
        """FLAC only supports 16 and 24 bit samples."""
        options = ConversionOptions.build({"audio": {"sample_size": 32}})
        with pytest.raises(OptionsValidationError, match="sample sizes"):
            options.validate_for(_media("flac"))
        options.validate_for(_media("wav"))

    def test_vbr_only_for_mp3(self):
        """VBR is an MP3 feature."""
        options = ConversionOptions.build({"audio": {"use_vbr": True}})
        options.validate_for(_media("mp3"))
        with pytest.raises(OptionsValidationError, match="VBR"):
            options.validate_for(_media("ogg"))

    def test_sample_rate_per_format(self):
        """WMA does not accept 8000 Hz."""
        options = ConversionOptions.build({"audio": {"sample_rate": 8000}})
        options.validate_for(_media("mp3"))
        with pytest.raises(OptionsValidationError, match="sample rates"):
            options.validate_for(_media("wma"))

    def test_gif_rejects_two_pass(self):
        """GIF output never runs two passes."""
        options = ConversionOptions.build({"video": {"two_pass": True}})
        with pytest.raises(OptionsValidationError):
            options.validate_for(_media("gif"))
        options.validate_for(_media("mp4"))

    def test_non_media_services_unchecked(self):
        """Image services are not subject to audio constraints."""
        options = ConversionOptions.build({"audio": {"bitrate": 192}})
        options.validate_for(ConversionService(BackendKind.IMAGE, IMAGE_FORMATS["png"]))
