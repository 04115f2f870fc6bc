"""Audio and video formats handled by ffmpeg."""

from morphit.formats.models import MediaFormat

ALL_SAMPLE_RATES = (
    8000, 11025, 12000, 16000, 22050, 24000, 32000, 44100, 48000,
    88200, 96000, 176400, 192000, 352800, 384000,
)  # fmt: skip
DEFAULT_SAMPLE_RATES = (22050, 44100, 48000, 96000)

AUDIO_BITRATES = (8, 16, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320)
SAMPLE_SIZES = (16, 20, 24, 32)

_X264_AAC = ("-c:v", "libx264", "-c:a", "aac")


def _video(fmt_id: str, display: str, codec_args: tuple[str, ...], crf: bool = True) -> MediaFormat:
    return MediaFormat(
        id=fmt_id,
        extension=fmt_id,
        display_name=display,
        lossy=True,
        is_video=True,
        codec_args=codec_args,
        supports_crf=crf,
    )


MEDIA_FORMATS: dict[str, MediaFormat] = {
    fmt.id: fmt
    for fmt in (
        # Video
        _video("mp4", "MP4", _X264_AAC),
        _video("mov", "MOV", _X264_AAC),
        _video("avi", "AVI", ("-c:v", "libx264", "-c:a", "libmp3lame")),
        _video("mkv", "MKV", _X264_AAC),
        _video("webm", "WebM", ("-c:v", "libvpx-vp9", "-c:a", "libvorbis")),
        _video("flv", "FLV", _X264_AAC),
        _video("wmv", "WMV", ("-c:v", "wmv2", "-c:a", "wmav2"), crf=False),
        _video("m4v", "M4V", _X264_AAC),
        # Animated GIF goes through the palette pipeline, not codec args
        MediaFormat(
            id="gif",
            extension="gif",
            display_name="Animated GIF",
            description="Silent looping animation with a 256-color palette.",
            lossy=True,
            is_video=True,
        ),
        # Audio
        MediaFormat(
            id="mp3",
            extension="mp3",
            display_name="MP3",
            description=(
                "Lossy, but the files are very compact and can be played "
                "in almost any application."
            ),
            lossy=True,
            is_video=False,
            codec_args=("-c:a", "libmp3lame"),
            supports_vbr=True,
            sample_rates=(8000, 11025, 12000, 16000, 22050, 24000, 32000, 44100, 48000),
        ),
        MediaFormat(
            id="aac",
            extension="m4a",
            display_name="AAC",
            description=(
                "Lossy, though less than MP3. The files are very compact, "
                "and are generally well supported by most applications."
            ),
            lossy=True,
            is_video=False,
            codec_args=("-c:a", "aac"),
            sample_rates=DEFAULT_SAMPLE_RATES,
        ),
        MediaFormat(
            id="wav",
            extension="wav",
            display_name="WAV",
            description=(
                "Lossless, but the files are enormous. "
                "They can be played by almost any application."
            ),
            is_video=False,
            lossless=True,
            codec_args=("-c:a", "pcm_s16le"),
            sample_sizes=(16, 24, 32),
            pcm_codec="pcm_s{bits}le",
        ),
        MediaFormat(
            id="flac",
            extension="flac",
            display_name="FLAC",
            description=(
                "Lossless, but the files are quite large. "
                "It's popular among audiophiles, but playback support is limited."
            ),
            is_video=False,
            lossless=True,
            codec_args=("-c:a", "flac"),
            sample_sizes=(16, 24),
        ),
        MediaFormat(
            id="alac",
            extension="m4a",
            display_name="ALAC",
            description=(
                "Lossless, but the files are quite large. "
                "Standard on Apple platforms, but less universal elsewhere."
            ),
            is_video=False,
            lossless=True,
            codec_args=("-c:a", "alac"),
            sample_sizes=(16, 20, 24),
            planar_samples=True,
        ),
        MediaFormat(
            id="ogg",
            extension="ogg",
            display_name="OGG",
            description=(
                "Lossy, with quality often better than MP3 at similar bitrates. "
                "While compact, it's not as universal as MP3 or AAC."
            ),
            lossy=True,
            is_video=False,
            codec_args=("-c:a", "libvorbis"),
            sample_rates=DEFAULT_SAMPLE_RATES,
        ),
        MediaFormat(
            id="wma",
            extension="wma",
            display_name="WMA",
            description=(
                "Lossy, with quality comparable to MP3. "
                "It's well-supported on Windows but less common on other platforms."
            ),
            lossy=True,
            is_video=False,
            codec_args=("-c:a", "wmav2"),
            sample_rates=(22050, 44100, 48000),
        ),
        MediaFormat(
            id="aiff",
            extension="aiff",
            display_name="AIFF",
            description=(
                "Lossless, but the files are quite large. "
                "Standard on Apple platforms, but less common than WAV elsewhere."
            ),
            is_video=False,
            lossless=True,
            codec_args=("-f", "aiff"),
            sample_sizes=(16, 24, 32),
            pcm_codec="pcm_s{bits}be",
        ),
    )
}

MEDIA_EXTENSIONS: dict[str, str] = {
    "mp4": "mp4",
    "mov": "mov",
    "avi": "avi",
    "mkv": "mkv",
    "webm": "webm",
    "flv": "flv",
    "wmv": "wmv",
    "m4v": "m4v",
    "mp3": "mp3",
    "aac": "aac",
    "m4a": "aac",
    "wav": "wav",
    "flac": "flac",
    "ogg": "ogg",
    "wma": "wma",
    "aiff": "aiff",
    "aif": "aiff",
}


def audio_formats() -> frozenset[MediaFormat]:
    return frozenset(fmt for fmt in MEDIA_FORMATS.values() if fmt.is_audio)


def all_media_formats() -> frozenset[MediaFormat]:
    return frozenset(MEDIA_FORMATS.values())
