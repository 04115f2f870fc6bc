"""Format model shared by every conversion domain."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal


class Domain(str, Enum):
    """Conversion domains, one per backend family."""

    DOCUMENT = "document"
    IMAGE = "image"
    MEDIA = "media"
    OCR = "ocr"
    SPEECH = "speech"
    ARCHIVE = "archive"

    @property
    def section_title(self) -> str:
        return _DOMAIN_TITLES[self]


_DOMAIN_TITLES = {
    Domain.DOCUMENT: "Documents",
    Domain.IMAGE: "Images",
    Domain.MEDIA: "Audio & Video",
    Domain.OCR: "Text Recognition",
    Domain.SPEECH: "Speech",
    Domain.ARCHIVE: "Archives",
}

DocumentCategory = Literal["general", "tabular", "bibliography"]
OCRMode = Literal["image", "extract", "pdf_ocr"]


@dataclass(frozen=True, kw_only=True)
class Format:
    """A file format known to one backend.

    Instances are immutable and compared by value, so they can key dicts and
    live in sets.
    """

    id: str
    extension: str
    display_name: str
    description: str | None = None
    lossy: bool = False

    domain: ClassVar[Domain]

    @property
    def filename_suffix(self) -> str:
        return f".{self.extension}"

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True, kw_only=True)
class DocumentFormat(Format):
    """A pandoc format.

    ``reader`` is the name passed to ``pandoc -f``; it is None for formats
    pandoc can only write.
    """

    domain: ClassVar[Domain] = Domain.DOCUMENT

    reader: str | None = None
    writable: bool = False
    category: DocumentCategory = "general"

    @property
    def readable(self) -> bool:
        return self.reader is not None


@dataclass(frozen=True, kw_only=True)
class ImageFormat(Format):
    """An ImageMagick raster or vector format."""

    domain: ClassVar[Domain] = Domain.IMAGE

    writable: bool = True
    supports_exif: bool = False
    requires_dpi: bool = False
    supports_transparency: bool = False
    supports_animation: bool = False
    # Extra ``-define`` arguments ImageMagick needs for a sane default
    defines: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class MediaFormat(Format):
    """An ffmpeg container/codec combination."""

    domain: ClassVar[Domain] = Domain.MEDIA

    is_video: bool
    lossless: bool = False
    codec_args: tuple[str, ...] = ()
    supports_crf: bool = False
    supports_vbr: bool = False
    # None means every rate in the global list is accepted
    sample_rates: tuple[int, ...] | None = None
    sample_sizes: tuple[int, ...] = ()
    # PCM codec template selected by sample size, e.g. "pcm_s{bits}le"
    pcm_codec: str | None = None
    planar_samples: bool = False

    @property
    def is_audio(self) -> bool:
        return not self.is_video


@dataclass(frozen=True, kw_only=True)
class OCRFormat(Format):
    """A text-recognition output."""

    domain: ClassVar[Domain] = Domain.OCR

    mode: OCRMode


@dataclass(frozen=True, kw_only=True)
class SpeechFormat(Format):
    """An audio container the speech synthesizer can write."""

    domain: ClassVar[Domain] = Domain.SPEECH

    say_args: tuple[str, ...]


@dataclass(frozen=True, kw_only=True)
class ArchiveFormat(Format):
    """An archive container.

    ``tar_flag`` is None for zip. ``level_env`` names the environment
    variable the tar compressor reads its level from.
    """

    domain: ClassVar[Domain] = Domain.ARCHIVE

    tar_flag: str | None = None
    level_env: str | None = None

    @property
    def is_zip(self) -> bool:
        return self.tar_flag is None
