"""Compatibility resolver: which outputs are valid for a set of inputs."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from morphit.core.models import BackendKind, ConversionService
from morphit.exceptions import UnsupportedFormatCombinationError
from morphit.formats.archive import ARCHIVE_FORMATS
from morphit.formats.document import compatible_document_outputs
from morphit.formats.image import MERGED_PDF, writable_image_formats
from morphit.formats.media import all_media_formats, audio_formats
from morphit.formats.models import DocumentFormat, Domain, Format, ImageFormat, MediaFormat
from morphit.formats.registry import FormatRegistry
from morphit.formats.text import OCR_FORMATS, SPEECH_FORMATS
from morphit.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ServiceSection:
    """A titled group of services; ``title`` is None when rendered flat."""

    title: str | None
    services: tuple[ConversionService, ...]


def _sort_key(service: ConversionService) -> tuple[str, str, str]:
    return (service.display_name.casefold(), service.kind.value, service.format.id)


def _services(kind: BackendKind, formats: Iterable[Format]) -> set[ConversionService]:
    return {ConversionService(kind, fmt) for fmt in formats}


class CompatibilityResolver:
    """Computes the output services valid for all inputs jointly."""

    def __init__(self, registry: FormatRegistry) -> None:
        self.registry = registry

    def compatible_outputs(self, inputs: Sequence[Path]) -> list[ConversionService]:
        """Return every service applicable to ``inputs``, sorted by display name.

        Args:
            inputs: Input file paths

        Returns:
            Sorted list of services; empty for an empty input list
        """
        if not inputs:
            return []

        if all(self.registry.is_pdf(path) for path in inputs):
            services = self._pdf_outputs()
        else:
            services = self._mixed_outputs(inputs)

        services |= _services(BackendKind.ARCHIVE, ARCHIVE_FORMATS.values())

        result = sorted(services, key=_sort_key)
        log.debug("Resolved compatible outputs", inputs=len(inputs), outputs=len(result))
        return result

    def sections(self, inputs: Sequence[Path]) -> list[ServiceSection]:
        """Group the compatible outputs by domain.

        A single non-empty domain yields one untitled section.
        """
        grouped: dict[Domain, list[ConversionService]] = {}
        for service in self.compatible_outputs(inputs):
            grouped.setdefault(service.kind.domain, []).append(service)

        if len(grouped) == 1:
            (services,) = grouped.values()
            return [ServiceSection(None, tuple(services))]

        return [
            ServiceSection(domain.section_title, tuple(grouped[domain]))
            for domain in Domain
            if domain in grouped
        ]

    def find(
        self, inputs: Sequence[Path], format_id: str, kind: BackendKind | None = None
    ) -> ConversionService:
        """Pick the compatible service producing ``format_id``.

        Raises:
            UnsupportedFormatCombinationError: If no compatible service matches,
                or the match is ambiguous without ``kind``
        """
        wanted = format_id.lower().lstrip(".")
        matches = [
            service
            for service in self.compatible_outputs(inputs)
            if wanted in (service.format.id, service.format.extension)
            and (kind is None or service.kind is kind)
        ]
        # An exact id match beats an extension match (jpeg vs jpg, aac vs m4a)
        exact = [service for service in matches if service.format.id == wanted]
        if exact:
            matches = exact
        if len(matches) != 1:
            source = inputs[0] if inputs else Path()
            if len(matches) > 1:
                kinds = ", ".join(sorted(service.kind.value for service in matches))
                raise UnsupportedFormatCombinationError(
                    source, f"{format_id} (ambiguous, choose one of: {kinds})"
                )
            raise UnsupportedFormatCombinationError(source, format_id)
        return matches[0]

    def _pdf_outputs(self) -> set[ConversionService]:
        services = _services(BackendKind.IMAGE, writable_image_formats())
        services.add(ConversionService(BackendKind.PDF, MERGED_PDF))
        services |= _services(
            BackendKind.OCR, (OCR_FORMATS["txt-extract"], OCR_FORMATS["txt-ocr"])
        )
        return services

    def _mixed_outputs(self, inputs: Sequence[Path]) -> set[ConversionService]:
        # PDFs in a mixed batch only contribute OCR
        detected = [
            self.registry.detect(path) for path in inputs if not self.registry.is_pdf(path)
        ]
        documents = [fmt for fmt in detected if isinstance(fmt, DocumentFormat)]
        images = [fmt for fmt in detected if isinstance(fmt, ImageFormat)]
        media = [fmt for fmt in detected if isinstance(fmt, MediaFormat)]

        services: set[ConversionService] = set()

        if documents:
            outputs = compatible_document_outputs(documents[0])
            for fmt in documents[1:]:
                outputs &= compatible_document_outputs(fmt)
            services |= _services(BackendKind.DOCUMENT, outputs)

        if images:
            services |= _services(BackendKind.IMAGE, writable_image_formats())

        if media:
            if all(fmt.is_audio for fmt in media):
                services |= _services(BackendKind.MEDIA, audio_formats())
            else:
                services |= _services(BackendKind.MEDIA, all_media_formats())

        if images or any(self.registry.is_pdf(path) for path in inputs):
            services.add(ConversionService(BackendKind.OCR, OCR_FORMATS["txt"]))

        if any(self.registry.is_speech_input(path) for path in inputs):
            services |= _services(BackendKind.SPEECH, SPEECH_FORMATS.values())

        return services
