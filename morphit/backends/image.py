"""ImageMagick-based image backend."""

from __future__ import annotations

import os
from pathlib import Path

import anyio
from PIL import Image

from morphit.backends.base import IOPaths, ToolBackend
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.core.options import ConversionOptions
from morphit.exceptions import KnownCause
from morphit.formats.image import EXIF_STRIP_EXTENSIONS
from morphit.formats.models import Format, ImageFormat
from morphit.formats.registry import extension_of
from morphit.pipelines.pdf_pages import export_pdf_pages
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

log = get_logger(__name__)

ORIENTATION_TAG = 0x0112

# ImageMagick exits 1 on warning-level problems (bad ICC profile, unknown
# EXIF field) after writing a usable file for these outputs
IMAGE_BENIGN_EXITS = frozenset({(1, "jpeg"), (1, "png"), (1, "webp"), (1, "tiff")})


def strip_exif(path: Path) -> None:
    """Drop the EXIF block of ``path`` in place, keeping the orientation tag."""
    with Image.open(path) as image:
        image.load()
        orientation = image.getexif().get(ORIENTATION_TAG)
        exif = Image.Exif()
        if orientation is not None:
            exif[ORIENTATION_TAG] = orientation

        save_kwargs: dict[str, object] = {"exif": exif.tobytes()}
        if image.format == "JPEG":
            save_kwargs["quality"] = "keep"
        staged = path.with_name(f".{path.name}.exif")
        image.save(staged, format=image.format, **save_kwargs)
    os.replace(staged, path)
    log.debug("EXIF stripped", file=str(path), kept_orientation=orientation is not None)


class ImageBackend(ToolBackend):
    """Image converter using ImageMagick (``magick``, or the legacy ``convert``)."""

    kind = BackendKind.IMAGE
    tool_names = ("magick", "convert")
    install_hint = "Install ImageMagick from https://imagemagick.org"
    known_causes = (
        ("gs: command not found", KnownCause.GHOSTSCRIPT_MISSING),
        ("gs: not found", KnownCause.GHOSTSCRIPT_MISSING),
        (("FailedToExecuteCommand", "'gs'", "No such file"), KnownCause.GHOSTSCRIPT_MISSING),
        ("potrace", KnownCause.POTRACE_MISSING),
    )
    benign_exits = IMAGE_BENIGN_EXITS

    def build_args(self, fmt: Format, options: ConversionOptions, paths: IOPaths) -> list[str]:
        args: list[str] = []
        if self.runtime.registry.is_pdf(paths.input):
            args.extend(["-density", str(options.pdf.dpi)])
        args.append(str(paths.input))
        if fmt.lossy:
            args.extend(["-quality", str(options.image.quality)])
        for define in self._defines(fmt, options):
            args.extend(["-define", define])
        args.append(str(paths.output))
        return args

    def _defines(self, fmt: Format, options: ConversionOptions) -> tuple[str, ...]:
        if not isinstance(fmt, ImageFormat):
            return ()
        if fmt.id == "webp" and not options.image.lossy:
            return ("webp:lossless=true",)
        return fmt.defines

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        source: Path = job.source
        fmt = job.service.format

        if self.runtime.registry.is_pdf(source):
            return await export_pdf_pages(self, source, fmt, job.options, token)

        output, name = self.output_for(source, fmt)
        log.info("Converting with ImageMagick", file=str(source), to=fmt.id)
        with self.discard_on_error(output):
            await self.invoke(fmt, job.options, IOPaths.single(source, output), token)
            await self.finish_output(output, job.options)
        return [ConvertedArtifact((source,), output, name)]

    async def finish_output(self, output: Path, options: ConversionOptions) -> None:
        """Post-process a written output (EXIF strip)."""
        if options.image.strip_exif and extension_of(output) in EXIF_STRIP_EXTENSIONS:
            await anyio.to_thread.run_sync(strip_exif, output)
