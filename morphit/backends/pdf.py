"""PDF merge backend using PyMuPDF."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import anyio
import fitz

from morphit.backends.base import Backend
from morphit.config.constants import MERGED_PDF_NAME
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.exceptions import ConversionError
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

log = get_logger(__name__)


def merge_pdfs(sources: Sequence[Path], output: Path, check: Callable[[], None]) -> int:
    """Append every page of ``sources``, in order, into ``output``.

    Returns:
        Page count of the merged document
    """
    with fitz.open() as merged:
        for source in sources:
            check()
            with fitz.open(source) as doc:
                merged.insert_pdf(doc)
        merged.save(output, garbage=3, deflate=True)
        return merged.page_count


class PDFBackend(Backend):
    """Combines all selected PDFs into one document."""

    kind = BackendKind.PDF

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        sources = job.sources
        output = self.runtime.temp.create_temp_file_named(MERGED_PDF_NAME)

        def check() -> None:
            if token is not None:
                token.raise_if_cancelled(sources[0])

        log.info("Merging PDFs", files=len(sources))
        with self.discard_on_error(output):
            try:
                pages = await anyio.to_thread.run_sync(merge_pdfs, sources, output, check)
            except (RuntimeError, ValueError) as e:
                raise ConversionError(sources[0], f"PDF merge failed: {e}", cause=e) from e
        log.debug("PDFs merged", pages=pages)
        return [ConvertedArtifact(tuple(sources), output, MERGED_PDF_NAME)]
