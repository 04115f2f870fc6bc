"""ffmpeg argument builders shared by the media backend and its pipelines."""

from morphit.core.options import RESOLUTIONS, AudioOptions, VideoOptions
from morphit.formats.models import MediaFormat

X26X_ENCODERS = ("libx264", "libx265")

# Aspect-only reshaping: fit inside the target ratio, then pad to it
_ASPECT_FILTERS = {
    "4:3": (
        "scale='iw*min(1,4/3*ih/iw)':'ih*min(1,iw*3/4/ih)',"
        "pad='max(iw,ih*4/3)':'max(ih,iw*3/4)':(ow-iw)/2:(oh-ih)/2,setsar=1"
    ),
    "16:9": (
        "scale='iw*min(1,16/9*ih/iw)':'ih*min(1,iw*9/16/ih)',"
        "pad='max(iw,ih*16/9)':'max(ih,iw*9/16)':(ow-iw)/2:(oh-ih)/2,setsar=1"
    ),
    "1:1": (
        "scale='min(iw,ih)':'min(iw,ih)',"
        "pad='max(iw,ih)':'max(iw,ih)':(ow-iw)/2:(oh-ih)/2,setsar=1"
    ),
}


def scale_filter(resolution: str, aspect_ratio: str) -> str:
    """Build the ``-vf`` scale/pad chain; empty when nothing changes."""
    if resolution == "auto":
        return _ASPECT_FILTERS.get(aspect_ratio, "")

    width, height = RESOLUTIONS[resolution]
    if aspect_ratio == "auto":
        return (
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
        )

    if aspect_ratio == "4:3":
        width = height * 4 // 3
    elif aspect_ratio == "16:9":
        width = height * 16 // 9
    else:
        width = height
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2,setsar=1"
    )


def fallback_bitrate(crf: int) -> str:
    """Bitrate standing in for a CRF value on codecs without CRF."""
    if crf < 20:
        return "10M"
    if crf < 30:
        return "5M"
    return "2.5M"


def video_codec(fmt: MediaFormat, options: VideoOptions) -> list[str]:
    """The format's codec arguments with the chosen H.264/H.265 encoder."""
    args = list(fmt.codec_args)
    if options.encoder == "libx265":
        args = ["libx265" if arg == "libx264" else arg for arg in args]
    return args


def uses_x26x(codec_args: list[str]) -> bool:
    return any(arg in X26X_ENCODERS for arg in codec_args)


def video_option_args(fmt: MediaFormat, options: VideoOptions, codec_args: list[str]) -> list[str]:
    """Scale filter plus rate control for a single-pass encode."""
    args: list[str] = []
    vf = scale_filter(options.resolution, options.aspect_ratio)
    if vf:
        args.extend(["-vf", vf])

    preset = ["-preset", options.preset] if uses_x26x(codec_args) else []
    if options.quality_mode == "crf":
        if fmt.supports_crf:
            args.extend(["-crf", str(options.crf), *preset])
        else:
            args.extend(["-b:v", fallback_bitrate(options.crf)])
    else:
        args.extend(["-b:v", options.effective_bitrate, *preset])
    return args


def audio_codec(fmt: MediaFormat, options: AudioOptions) -> list[str]:
    """The format's codec arguments, with the PCM codec picked by sample size."""
    args = list(fmt.codec_args)
    if fmt.pcm_codec:
        codec = fmt.pcm_codec.format(bits=options.sample_size)
        if "-c:a" in args:
            args[args.index("-c:a") + 1] = codec
        else:
            args.extend(["-c:a", codec])
    return args


def audio_option_args(fmt: MediaFormat, options: AudioOptions) -> list[str]:
    """Rate control, channel layout, sample rate and sample format."""
    args: list[str] = []
    if not fmt.lossless:
        if options.use_vbr and fmt.supports_vbr:
            args.extend(["-q:a", str(options.vbr_quality)])
        elif options.bitrate is not None:
            args.extend(["-b:a", f"{options.bitrate}k"])

    if options.channel_count is not None:
        args.extend(["-ac", str(options.channel_count)])
    if options.sample_rate is not None:
        args.extend(["-ar", str(options.sample_rate)])

    # PCM formats carry the size in the codec name
    if fmt.lossless and not fmt.pcm_codec:
        bits = options.sample_size
        sample_fmt = "s16" if bits <= 16 else "s32"
        if fmt.planar_samples:
            sample_fmt += "p"
        args.extend(["-sample_fmt", sample_fmt])
        if bits not in (16, 32):
            args.extend(["-bits_per_raw_sample", str(bits)])
    return args
