"""Archive creation followed by an optional integrity pass."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from morphit.backends.base import IOPaths, require_output
from morphit.config.constants import BUNDLED_ARCHIVE_STEM
from morphit.core.models import ConvertedArtifact
from morphit.exceptions import VerificationFailedError
from morphit.formats.models import ArchiveFormat
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

if TYPE_CHECKING:
    from morphit.backends.archive import ArchiveBackend
    from morphit.core.options import ConversionOptions

log = get_logger(__name__)


def common_parent(sources: Sequence[Path]) -> Path:
    """Deepest directory containing every source."""
    return Path(os.path.commonpath([str(source.resolve().parent) for source in sources]))


def member_names(sources: Sequence[Path], root: Path) -> list[str]:
    """Archive member names of ``sources`` relative to ``root``."""
    return [str(source.resolve().relative_to(root)) for source in sources]


async def create_archive(
    backend: ArchiveBackend,
    fmt: ArchiveFormat,
    options: ConversionOptions,
    sources: tuple[Path, ...],
    output: Path,
    token: CancellationToken | None = None,
) -> None:
    """Write ``sources`` into ``output``, then verify it if asked to.

    Raises:
        InvocationFailedError: If the compressor fails
        VerificationFailedError: If the integrity pass rejects the archive
    """
    source = sources[0]
    paths = IOPaths(sources, output)
    handle = backend.locate_tool(source, "zip" if fmt.is_zip else "tar")
    args = backend.build_args(fmt, options, paths)

    log.info(
        "Creating archive",
        format=fmt.id,
        files=len(sources),
        level=options.archive.compression_level,
    )
    result = await backend.run(
        handle,
        args,
        source=source,
        env=backend.environment(fmt, options),
        cwd=common_parent(sources),
        token=token,
    )
    backend.classify(result, fmt, source, output)
    require_output(output, source)

    if options.archive.verify:
        await verify_archive(backend, fmt, output, source, token)


async def verify_archive(
    backend: ArchiveBackend,
    fmt: ArchiveFormat,
    archive: Path,
    source: Path,
    token: CancellationToken | None = None,
) -> None:
    """List or test ``archive`` with the matching reader tool."""
    if fmt.is_zip:
        handle = backend.locate_tool(source, "unzip")
        args = ["-t", str(archive)]
    else:
        handle = backend.locate_tool(source, "tar")
        args = ["-tf", str(archive)]

    result = await backend.run(handle, args, source=source, token=token)
    if result.exit_code != 0:
        log.error("Archive verification failed", archive=archive.name, stderr=result.stderr)
        raise VerificationFailedError(source, result.stderr or result.stdout)
    log.debug("Archive verified", archive=archive.name)


async def build_archives(
    backend: ArchiveBackend,
    fmt: ArchiveFormat,
    options: ConversionOptions,
    sources: tuple[Path, ...],
    token: CancellationToken | None = None,
) -> list[ConvertedArtifact]:
    """Bundle all sources into ``Archive.ext``, or one ``stem.ext`` per source."""
    temp = backend.runtime.temp

    if not options.archive.separate:
        name = f"{BUNDLED_ARCHIVE_STEM}.{fmt.extension}"
        output = temp.create_temp_file_named(name)
        with backend.discard_on_error(output):
            await create_archive(backend, fmt, options, sources, output, token)
        return [ConvertedArtifact(sources, output, name)]

    artifacts: list[ConvertedArtifact] = []
    try:
        for source in sources:
            name = f"{source.stem}.{fmt.extension}"
            output = temp.create_temp_file_named(name)
            with backend.discard_on_error(output):
                await create_archive(backend, fmt, options, (source,), output, token)
            artifacts.append(ConvertedArtifact((source,), output, name))
    except BaseException:
        for artifact in artifacts:
            temp.remove(artifact.temp_path)
        raise
    return artifacts
