"""Multi-page PDF export: one image artifact per page."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from morphit.backends.base import IOPaths
from morphit.core.models import ConvertedArtifact
from morphit.exceptions import NoOutputError
from morphit.formats.models import Format
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

if TYPE_CHECKING:
    from morphit.backends.image import ImageBackend
    from morphit.core.options import ConversionOptions

log = get_logger(__name__)


def collect_pages(directory: Path, stem: str, extension: str) -> list[tuple[Path, str]]:
    """Find ``stem-N.ext`` files from N=0 up, stopping at the first gap.

    Returns:
        (page file, suggested name) pairs, the name being ``stem-page{N+1}.ext``
    """
    pages: list[tuple[Path, str]] = []
    number = 0
    while True:
        candidate = directory / f"{stem}-{number}.{extension}"
        if not candidate.exists():
            return pages
        pages.append((candidate, f"{stem}-page{number + 1}.{extension}"))
        number += 1


async def export_pdf_pages(
    backend: ImageBackend,
    source: Path,
    fmt: Format,
    options: ConversionOptions,
    token: CancellationToken | None = None,
) -> list[ConvertedArtifact]:
    """Rasterize ``source`` with ImageMagick and collect every page.

    ImageMagick writes ``stem-0.ext``, ``stem-1.ext`` ... for multi-page
    input and plain ``stem.ext`` for a single page; both shapes are
    handled.

    Raises:
        NoOutputError: If neither numbered pages nor the plain output exist
    """
    temp = backend.runtime.temp
    directory = temp.create_temp_directory()
    stem = source.stem
    output = directory / f"{stem}.{fmt.extension}"
    log.info("Exporting PDF pages", file=str(source), to=fmt.id, dpi=options.pdf.dpi)

    with backend.discard_on_error(directory):
        handle = backend.locate(source)
        args = backend.build_args(fmt, options, IOPaths.single(source, output))
        result = await backend.run(handle, args, source=source, token=token)

        pages = collect_pages(directory, stem, fmt.extension)
        first = pages[0][0] if pages else output
        backend.classify(result, fmt, source, first)

        if not pages:
            if not output.exists():
                raise NoOutputError(source, "ImageMagick produced no pages")
            pages = [(output, f"{stem}.{fmt.extension}")]

        artifacts = []
        for path, name in pages:
            temp.track(path)
            await backend.finish_output(path, options)
            artifacts.append(ConvertedArtifact((source,), path, name))

    log.debug("PDF pages collected", file=str(source), pages=len(artifacts))
    return artifacts
