"""Pandoc-based document backend."""

import os
from pathlib import Path

from morphit.backends.base import IOPaths, ToolBackend
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.exceptions import KnownCause
from morphit.formats.models import DocumentFormat, Format
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

log = get_logger(__name__)

LATEX_FAILURE_MARKERS = (
    "pdflatex not found",
    "pdflatex: not found",
    "pdflatex: command not found",
    "Cannot find",
    "LaTeX Error",
)


class DocumentBackend(ToolBackend):
    """Document converter using Pandoc.

    PDF output goes through a LaTeX engine, so the TeX binary directories
    are put in front of PATH for those runs and a missing engine is
    reported as a known cause rather than a raw pandoc failure.
    """

    kind = BackendKind.DOCUMENT
    tool_names = ("pandoc",)
    install_hint = "Install it from https://pandoc.org/installing.html"
    known_causes = tuple((marker, KnownCause.LATEX_MISSING) for marker in LATEX_FAILURE_MARKERS)

    def known_causes_for(self, fmt: Format) -> tuple[tuple[str, KnownCause], ...]:
        # Only PDF output runs a LaTeX engine
        return self.known_causes if fmt.id == "pdf" else ()

    def build_args(self, fmt: Format, options: object, paths: IOPaths) -> list[str]:
        args = ["-o", str(paths.output)]
        source = self.runtime.registry.detect(paths.input)
        if isinstance(source, DocumentFormat) and source.readable:
            args.extend(["-f", source.reader])
        args.extend(["-t", fmt.id, str(paths.input)])
        return args

    def environment(self, fmt: Format) -> dict[str, str] | None:
        """Child environment; None inherits ours unchanged."""
        if fmt.id != "pdf":
            return None
        env = dict(os.environ)
        tex_dirs = [d for d in self.runtime.settings.tools.tex_dirs if d]
        env["PATH"] = os.pathsep.join([*tex_dirs, env.get("PATH", "")])
        return env

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        source: Path = job.source
        fmt = job.service.format
        output, name = self.output_for(source, fmt)
        log.info("Converting with Pandoc", file=str(source), to=fmt.id)

        with self.discard_on_error(output):
            await self.invoke(
                fmt, job.options, IOPaths.single(source, output), token, env=self.environment(fmt)
            )
        return [ConvertedArtifact((source,), output, name)]
