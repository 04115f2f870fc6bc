"""zip/tar archive backend."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from morphit.backends.base import IOPaths, ToolBackend
from morphit.backends.locator import ToolHandle
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.core.options import ConversionOptions
from morphit.formats.models import ArchiveFormat, Format
from morphit.pipelines.archive import build_archives, common_parent, member_names
from morphit.process.runner import CancellationToken

if TYPE_CHECKING:
    from morphit.core.runtime import Runtime

# Compression level names to the numeric level zip, gzip, bzip2 and xz share
COMPRESSION_LEVELS = {
    "fastest": 1,
    "fast": 3,
    "normal": 6,
    "better": 8,
    "best": 9,
}


class ArchiveBackend(ToolBackend):
    """Creates archives with ``zip`` or ``tar`` and verifies them.

    Members are named relative to the inputs' common parent, which is the
    compressor's working directory.
    """

    kind = BackendKind.ARCHIVE
    tool_names = ("tar",)

    def __init__(self, runtime: Runtime) -> None:
        super().__init__(runtime)
        self._tools: dict[str, ToolHandle] = {}

    def locate_tool(self, source: Path, name: str) -> ToolHandle:
        if name not in self._tools:
            self._tools[name] = self.runtime.locator.require(source, name)
        return self._tools[name]

    def build_args(self, fmt: Format, options: ConversionOptions, paths: IOPaths) -> list[str]:
        assert isinstance(fmt, ArchiveFormat)
        names = member_names(paths.inputs, common_parent(paths.inputs))
        level = COMPRESSION_LEVELS[options.archive.compression_level]
        if fmt.is_zip:
            return ["-r", f"-{level}", str(paths.output), *names]
        return [fmt.tar_flag, str(paths.output), *names]

    def environment(self, fmt: ArchiveFormat, options: ConversionOptions) -> dict[str, str] | None:
        """tar reads the compressor level from the environment."""
        if fmt.level_env is None:
            return None
        env = dict(os.environ)
        env[fmt.level_env] = f"-{COMPRESSION_LEVELS[options.archive.compression_level]}"
        return env

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        fmt = job.service.format
        assert isinstance(fmt, ArchiveFormat)
        return await build_archives(self, fmt, job.options, job.sources, token)
