"""Service router: picks the backend executor for a conversion service."""

from __future__ import annotations

from morphit.backends.archive import ArchiveBackend
from morphit.backends.base import Backend
from morphit.backends.document import DocumentBackend
from morphit.backends.image import ImageBackend
from morphit.backends.media import MediaBackend
from morphit.backends.ocr import OCRBackend
from morphit.backends.pdf import PDFBackend
from morphit.backends.speech import SpeechBackend
from morphit.core.models import BackendKind, ConversionService
from morphit.core.runtime import Runtime
from morphit.utils.logging import get_logger

log = get_logger(__name__)

BACKENDS: dict[BackendKind, type[Backend]] = {
    BackendKind.DOCUMENT: DocumentBackend,
    BackendKind.IMAGE: ImageBackend,
    BackendKind.MEDIA: MediaBackend,
    BackendKind.OCR: OCRBackend,
    BackendKind.SPEECH: SpeechBackend,
    BackendKind.ARCHIVE: ArchiveBackend,
    BackendKind.PDF: PDFBackend,
}


class FormatRouter:
    """Routes services to backend executors.

    Backends are created on first use and kept for the router's lifetime,
    so each keeps its located tool handle across the jobs of a batch.
    """

    def __init__(
        self, runtime: Runtime, backends: dict[BackendKind, type[Backend]] | None = None
    ) -> None:
        self.runtime = runtime
        self._classes = dict(backends or BACKENDS)
        self._backends: dict[BackendKind, Backend] = {}

    def route(self, service: ConversionService) -> Backend:
        """Return the executor for ``service``.

        Raises:
            KeyError: If no backend is registered for the service's kind
        """
        backend = self._backends.get(service.kind)
        if backend is None:
            backend = self._classes[service.kind](self.runtime)
            self._backends[service.kind] = backend
            log.debug("Backend created", kind=service.kind.value, backend=type(backend).__name__)
        return backend
