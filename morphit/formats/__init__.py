"""Format catalogs and detection for morphit."""

from morphit.formats.models import (
    ArchiveFormat,
    DocumentFormat,
    Domain,
    Format,
    ImageFormat,
    MediaFormat,
    OCRFormat,
    SpeechFormat,
)
from morphit.formats.registry import FormatRegistry, extension_of

__all__ = [
    "Domain",
    "Format",
    "DocumentFormat",
    "ImageFormat",
    "MediaFormat",
    "OCRFormat",
    "SpeechFormat",
    "ArchiveFormat",
    "FormatRegistry",
    "extension_of",
]
