"""Format registry: static catalogs and extension detection."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from morphit.formats.archive import ARCHIVE_FORMATS
from morphit.formats.document import DOCUMENT_EXTENSIONS, DOCUMENT_FORMATS
from morphit.formats.image import IMAGE_EXTENSIONS, IMAGE_FORMATS
from morphit.formats.media import MEDIA_EXTENSIONS, MEDIA_FORMATS
from morphit.formats.models import Domain, Format
from morphit.formats.text import OCR_FORMATS, SPEECH_FORMATS, SPEECH_INPUT_EXTENSIONS

PDF_EXTENSION = "pdf"


def extension_of(path: Path | str) -> str:
    """Return the lowercase extension of ``path`` without the dot."""
    return Path(path).suffix.lower().lstrip(".")


class FormatRegistry:
    """Read-only lookup over the per-domain format catalogs.

    The registry holds no mutable state after construction and can be shared
    freely between threads.
    """

    def __init__(self) -> None:
        self._catalogs: dict[Domain, Mapping[str, Format]] = {
            Domain.DOCUMENT: MappingProxyType(DOCUMENT_FORMATS),
            Domain.IMAGE: MappingProxyType(IMAGE_FORMATS),
            Domain.MEDIA: MappingProxyType(MEDIA_FORMATS),
            Domain.OCR: MappingProxyType(OCR_FORMATS),
            Domain.SPEECH: MappingProxyType(SPEECH_FORMATS),
            Domain.ARCHIVE: MappingProxyType(ARCHIVE_FORMATS),
        }
        # Input detection order; extensions are disjoint across these tables
        self._detectors: list[tuple[Domain, Mapping[str, str]]] = [
            (Domain.DOCUMENT, MappingProxyType(DOCUMENT_EXTENSIONS)),
            (Domain.IMAGE, MappingProxyType(IMAGE_EXTENSIONS)),
            (Domain.MEDIA, MappingProxyType(MEDIA_EXTENSIONS)),
        ]

    def catalog(self, domain: Domain) -> Mapping[str, Format]:
        """Return the catalog of ``domain`` keyed by format id."""
        return self._catalogs[domain]

    def get(self, domain: Domain, format_id: str) -> Format:
        """Look up a format by domain and id.

        Raises:
            KeyError: If the domain has no such format
        """
        try:
            return self._catalogs[domain][format_id.lower()]
        except KeyError:
            raise KeyError(f"Unknown {domain.value} format: {format_id}") from None

    def detect(self, path: Path | str, *, all_pdf: bool = False) -> Format | None:
        """Detect the input format of ``path`` from its extension.

        PDF is ambiguous: it is an image source when the whole batch is PDFs,
        otherwise the (write-only) document PDF.

        Args:
            path: Input file path
            all_pdf: Whether every file of the batch is a PDF

        Returns:
            The detected format, or None if no backend reads it
        """
        ext = extension_of(path)
        if not ext:
            return None
        if ext == PDF_EXTENSION:
            domain = Domain.IMAGE if all_pdf else Domain.DOCUMENT
            return self._catalogs[domain][PDF_EXTENSION]
        for domain, table in self._detectors:
            format_id = table.get(ext)
            if format_id is not None:
                return self._catalogs[domain][format_id]
        return None

    def is_pdf(self, path: Path | str) -> bool:
        return extension_of(path) == PDF_EXTENSION

    def is_speech_input(self, path: Path | str) -> bool:
        return extension_of(path) in SPEECH_INPUT_EXTENSIONS
