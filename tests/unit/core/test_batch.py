"""Tests for the batch converter."""

import asyncio
from pathlib import Path

import pytest

from morphit.backends.base import Backend
from morphit.core.batch import BatchConverter, convert_batch
from morphit.core.models import BackendKind, ConversionService, ConvertedArtifact, JobState
from morphit.core.options import ConversionOptions
from morphit.core.router import FormatRouter
from morphit.exceptions import (
    ConversionCancelledError,
    ConversionError,
    InvocationFailedError,
    OptionsValidationError,
)
from morphit.formats.archive import ARCHIVE_FORMATS
from morphit.formats.image import IMAGE_FORMATS
from morphit.formats.media import MEDIA_FORMATS
from morphit.process.runner import CancellationToken

PNG = ConversionService(BackendKind.IMAGE, IMAGE_FORMATS["png"])
ZIP = ConversionService(BackendKind.ARCHIVE, ARCHIVE_FORMATS["zip"])


class ScriptedBackend(Backend):
    """Writes one artifact per job; fails or cancels on named inputs."""

    kind = BackendKind.IMAGE

    def __init__(self, runtime, fail_on=(), cancel_on=(), crash_on=(), token=None):
        super().__init__(runtime)
        self.fail_on = set(fail_on)
        self.cancel_on = set(cancel_on)
        self.crash_on = set(crash_on)
        self.token = token
        self.seen: list[tuple[Path, ...]] = []

    async def convert(self, job, token=None):
        self.seen.append(job.sources)
        name = job.source.name
        if name in self.fail_on:
            raise InvocationFailedError(job.source, "bad input", 1)
        if name in self.cancel_on:
            if self.token is not None:
                self.token.cancel()
            raise ConversionCancelledError(job.source)
        if name in self.crash_on:
            raise ValueError("corrupt header")
        output, suggested = self.output_for(job.source, job.service.format)
        output.write_bytes(b"data")
        return [ConvertedArtifact(job.sources, output, suggested)]


def _inputs(directory: Path, *names: str) -> list[Path]:
    paths = []
    for name in names:
        path = directory / name
        path.write_bytes(b"input")
        paths.append(path)
    return paths


def _converter(runtime, backend: ScriptedBackend) -> BatchConverter:
    router = FormatRouter(runtime, {kind: lambda rt: backend for kind in BackendKind})
    return BatchConverter(runtime, router)


class TestConvertBatch:
    """Tests for BatchConverter.convert_batch."""

    async def test_all_succeed(self, runtime, temp_dir):
        """Each input yields one artifact, in order."""
        backend = ScriptedBackend(runtime)
        inputs = _inputs(temp_dir, "a.jpg", "b.jpg")

        result = await _converter(runtime, backend).convert_batch(inputs, PNG)

        assert result.success
        assert [a.suggested_name for a in result.artifacts] == ["a.png", "b.png"]
        assert all(a.output_format == "png" for a in result.artifacts)
        assert all(job.state is JobState.SUCCEEDED for job in result.jobs)

    async def test_fail_fast(self, runtime, temp_dir):
        """The first failure stops the batch; earlier artifacts are kept."""
        backend = ScriptedBackend(runtime, fail_on={"b.jpg"})
        inputs = _inputs(temp_dir, "a.jpg", "b.jpg", "c.jpg")

        result = await _converter(runtime, backend).convert_batch(inputs, PNG)

        assert isinstance(result.error, InvocationFailedError)
        assert len(result.artifacts) == 1
        assert [s[0].name for s in backend.seen] == ["a.jpg", "b.jpg"]
        assert [job.state for job in result.jobs] == [JobState.SUCCEEDED, JobState.FAILED]

    async def test_unexpected_error_is_wrapped(self, runtime, temp_dir):
        """Non-conversion exceptions become ConversionError with the cause kept."""
        backend = ScriptedBackend(runtime, crash_on={"a.jpg"})
        inputs = _inputs(temp_dir, "a.jpg")

        result = await _converter(runtime, backend).convert_batch(inputs, PNG)

        assert isinstance(result.error, ConversionError)
        assert isinstance(result.error.cause, ValueError)
        assert "Unexpected error" in str(result.error)

    async def test_cancellation_stops_batch(self, runtime, temp_dir):
        """A cancelled job stops the batch and marks it cancelled."""
        token = CancellationToken()
        backend = ScriptedBackend(runtime, cancel_on={"a.jpg"}, token=token)
        inputs = _inputs(temp_dir, "a.jpg", "b.jpg")

        result = await _converter(runtime, backend).convert_batch(inputs, PNG, token=token)

        assert isinstance(result.error, ConversionCancelledError)
        assert result.cancelled
        assert result.artifacts == []
        assert len(backend.seen) == 1

    async def test_pre_cancelled_token(self, runtime, temp_dir):
        """A token cancelled up front runs nothing."""
        token = CancellationToken()
        token.cancel()
        backend = ScriptedBackend(runtime)

        result = await _converter(runtime, backend).convert_batch(
            _inputs(temp_dir, "a.jpg"), PNG, token=token
        )

        assert isinstance(result.error, ConversionCancelledError)
        assert backend.seen == []

    async def test_task_cancellation_propagates(self, runtime, temp_dir):
        """Cancelling the asyncio task marks the job cancelled and re-raises."""
        started = asyncio.Event()

        class Blocking(ScriptedBackend):
            async def convert(self, job, token=None):
                started.set()
                await asyncio.sleep(10)
                return []

        converter = _converter(runtime, Blocking(runtime))
        task = asyncio.create_task(converter.convert_batch(_inputs(temp_dir, "a.jpg"), PNG))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_progress_callback(self, runtime, temp_dir):
        """Progress is reported as (current, total) before each job."""
        seen: list[tuple[int, int]] = []
        converter = _converter(runtime, ScriptedBackend(runtime))

        await converter.convert_batch(
            _inputs(temp_dir, "a.jpg", "b.jpg"), PNG, progress=lambda c, t: seen.append((c, t))
        )

        assert seen == [(1, 2), (2, 2)]
        assert converter.progress.fraction == 1.0

    async def test_merging_service_runs_one_job(self, runtime, temp_dir):
        """Archives consume every input in one job."""
        backend = ScriptedBackend(runtime)
        inputs = _inputs(temp_dir, "a.txt", "b.txt")

        result = await _converter(runtime, backend).convert_batch(inputs, ZIP)

        assert len(result.jobs) == 1
        assert backend.seen == [tuple(inputs)]

    async def test_options_validated_first(self, runtime, temp_dir):
        """Invalid options raise before any job runs."""
        backend = ScriptedBackend(runtime)
        options = ConversionOptions.build({"audio": {"bitrate": 192}})
        flac = ConversionService(BackendKind.MEDIA, MEDIA_FORMATS["flac"])

        with pytest.raises(OptionsValidationError):
            await _converter(runtime, backend).convert_batch(
                _inputs(temp_dir, "a.wav"), flac, options
            )
        assert backend.seen == []

    async def test_module_level_helper(self, runtime, temp_dir, monkeypatch):
        """convert_batch() builds a one-off converter over the default router."""
        backend = ScriptedBackend(runtime)
        monkeypatch.setattr(FormatRouter, "route", lambda self, service: backend)

        result = await convert_batch(runtime, _inputs(temp_dir, "a.jpg"), PNG)

        assert len(result.artifacts) == 1


class TestSave:
    """Tests for saving artifacts and conflict handling."""

    async def _one_artifact(self, runtime, temp_dir, name="a.jpg"):
        converter = _converter(runtime, ScriptedBackend(runtime))
        result = await converter.convert_batch(_inputs(temp_dir, name), PNG)
        return converter, result.artifacts[0]

    async def test_save_moves_and_untracks(self, runtime, temp_dir, tmp_path):
        """Saving moves the file out of scratch space and records it."""
        converter, artifact = await self._one_artifact(runtime, temp_dir)
        out = tmp_path / "out"

        path = converter.save(artifact, out)

        assert path == out / "a.png"
        assert path.read_bytes() == b"data"
        assert runtime.temp.active_count == 0
        record = converter.records[0]
        assert record.input_name == "a.jpg"
        assert record.input_format == "jpeg"
        assert record.output_format == "png"
        assert record.size == 4

    async def test_rename_on_conflict(self, runtime, temp_dir, tmp_path):
        """rename keeps both files."""
        converter, artifact = await self._one_artifact(runtime, temp_dir)
        (tmp_path / "a.png").write_bytes(b"old")

        path = converter.save(artifact, tmp_path, "rename")

        assert path.name == "a_1.png"
        assert (tmp_path / "a.png").read_bytes() == b"old"

    async def test_overwrite_on_conflict(self, runtime, temp_dir, tmp_path):
        """overwrite replaces the existing file."""
        converter, artifact = await self._one_artifact(runtime, temp_dir)
        (tmp_path / "a.png").write_bytes(b"old")

        path = converter.save(artifact, tmp_path, "overwrite")

        assert path.read_bytes() == b"data"

    async def test_skip_on_conflict(self, runtime, temp_dir, tmp_path):
        """skip refuses to save; the artifact can then be discarded."""
        converter, artifact = await self._one_artifact(runtime, temp_dir)
        (tmp_path / "a.png").write_bytes(b"old")

        with pytest.raises(ConversionError, match="already exists"):
            converter.save(artifact, tmp_path, "skip")
        converter.discard(artifact)

        assert not artifact.temp_path.exists()
        assert runtime.temp.active_count == 0
        assert converter.records == []
