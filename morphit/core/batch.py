"""Batch conversion driver with fail-fast semantics."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Literal

from morphit.core.models import (
    BatchProgress,
    BatchResult,
    ConversionJob,
    ConversionRecord,
    ConversionService,
    ConvertedArtifact,
)
from morphit.core.options import ConversionOptions
from morphit.core.router import FormatRouter
from morphit.core.runtime import Runtime
from morphit.exceptions import ConversionCancelledError, ConversionError
from morphit.process.runner import CancellationToken
from morphit.utils.fs import get_unique_path, move_file_safe, safe_filename
from morphit.utils.logging import get_logger

log = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]
ConflictStrategy = Literal["skip", "overwrite", "rename"]


class BatchConverter:
    """Runs one job per input file, in order, stopping at the first failure.

    Artifacts stay in scratch space until the caller saves or discards them.
    """

    def __init__(self, runtime: Runtime, router: FormatRouter | None = None) -> None:
        self.runtime = runtime
        self.router = router or FormatRouter(runtime)
        self.progress = BatchProgress()
        self._records: list[ConversionRecord] = []

    @property
    def records(self) -> list[ConversionRecord]:
        """History entries for every artifact saved so far."""
        return list(self._records)

    def plan(
        self, inputs: Sequence[Path], service: ConversionService, options: ConversionOptions
    ) -> list[ConversionJob]:
        """One job per input, or a single job over all inputs for merging services."""
        if service.merges_inputs:
            return [ConversionJob(tuple(inputs), service, options)]
        return [ConversionJob((path,), service, options) for path in inputs]

    async def convert_batch(
        self,
        inputs: Sequence[Path],
        service: ConversionService,
        options: ConversionOptions | None = None,
        progress: ProgressCallback | None = None,
        token: CancellationToken | None = None,
    ) -> BatchResult:
        """Convert ``inputs`` with ``service``.

        Args:
            inputs: Input files, processed in the given order
            service: Service chosen from the compatible outputs
            options: Backend options; defaults when None
            progress: Called with (current, total) as each job starts
            token: Cancels the running job and stops the batch

        Returns:
            BatchResult with the artifacts of every completed job and the
            first error, if any

        Raises:
            OptionsValidationError: If the options do not fit the service's format
            asyncio.CancelledError: If the task running the batch is cancelled
        """
        options = options or ConversionOptions()
        options.validate_for(service)

        result = BatchResult()
        jobs = self.plan(inputs, service, options)
        self.progress = BatchProgress(total=len(jobs))
        log.info("Starting batch", service=str(service), files=len(inputs), jobs=len(jobs))

        for job in jobs:
            if token is not None and token.cancelled:
                result.error = ConversionCancelledError(job.source)
                break

            result.jobs.append(job)
            self.progress.current += 1
            if progress is not None:
                progress(self.progress.current, self.progress.total)

            try:
                await self.run_job(job, token)
            except asyncio.CancelledError:
                log.warning("Batch task cancelled", file=str(job.source))
                raise

            if job.error is not None:
                result.error = job.error
                break
            result.artifacts.extend(job.artifacts)

        log.info(
            "Batch finished",
            artifacts=len(result.artifacts),
            jobs=len(result.jobs),
            error=str(result.error) if result.error else None,
        )
        return result

    async def run_job(self, job: ConversionJob, token: CancellationToken | None = None) -> None:
        """Execute ``job``, recording its terminal state on the job itself.

        Raises:
            asyncio.CancelledError: After marking the job cancelled
        """
        backend = self.router.route(job.service)
        job.start()
        log.debug("Job started", file=str(job.source), service=str(job.service))
        try:
            artifacts = await backend.convert(job, token)
        except ConversionCancelledError as e:
            log.warning("Job cancelled", file=str(job.source))
            job.cancel(e)
        except asyncio.CancelledError:
            job.cancel(ConversionCancelledError(job.source))
            raise
        except ConversionError as e:
            log.error("Job failed", file=str(job.source), error=str(e))
            job.fail(e)
        except Exception as e:
            log.error("Unexpected error", file=str(job.source), error=str(e), exc_info=True)
            job.fail(ConversionError(job.source, f"Unexpected error: {e}", cause=e))
        else:
            job.succeed(artifacts)
            log.info("Job succeeded", file=str(job.source), artifacts=len(artifacts))

    def save(
        self,
        artifact: ConvertedArtifact,
        destination: Path,
        on_conflict: ConflictStrategy | None = None,
    ) -> Path:
        """Move ``artifact`` into the ``destination`` directory.

        The temp path is untracked once moved; the caller owns the file.

        Args:
            artifact: Artifact from a finished batch
            destination: Output directory
            on_conflict: skip, overwrite or rename; the configured strategy
                when None

        Returns:
            Final path of the saved file

        Raises:
            ConversionError: If the target exists and the strategy is "skip"
        """
        strategy = on_conflict or self.runtime.settings.output.on_conflict
        name = safe_filename(artifact.suggested_name)
        target = self._resolve_conflict(destination / name, strategy)

        move_file_safe(artifact.temp_path, target, overwrite=True)
        self.runtime.temp.release(artifact.temp_path)
        log.info("Artifact saved", path=str(target))

        self._records.append(self._record(artifact, target))
        return target

    def discard(self, artifact: ConvertedArtifact) -> None:
        """Delete an artifact the caller does not want."""
        self.runtime.temp.remove(artifact.temp_path)

    def _resolve_conflict(self, path: Path, strategy: ConflictStrategy) -> Path:
        if not path.exists() or strategy == "overwrite":
            return path
        if strategy == "skip":
            raise ConversionError(path, f"Output file already exists: {path}")
        return get_unique_path(path)

    def _record(self, artifact: ConvertedArtifact, target: Path) -> ConversionRecord:
        source = artifact.source
        detected = self.runtime.registry.detect(source)
        if len(artifact.sources) == 1:
            input_name = source.name
        else:
            input_name = f"{len(artifact.sources)} files"
        return ConversionRecord(
            input_name=input_name,
            input_format=detected.id if detected else source.suffix.lstrip(".").lower(),
            output_name=target.name,
            output_format=artifact.output_format or target.suffix.lstrip("."),
            output_path=target,
            size=target.stat().st_size,
        )


async def convert_batch(
    runtime: Runtime,
    inputs: Sequence[Path],
    service: ConversionService,
    options: ConversionOptions | None = None,
    progress: ProgressCallback | None = None,
    token: CancellationToken | None = None,
) -> BatchResult:
    """Convert ``inputs`` with a one-off :class:`BatchConverter`."""
    return await BatchConverter(runtime).convert_batch(inputs, service, options, progress, token)
