"""Tests for conversion data classes."""

from pathlib import Path

import pytest

from morphit.core.models import (
    BackendKind,
    BatchProgress,
    BatchResult,
    ConversionJob,
    ConversionRecord,
    ConversionService,
    ConvertedArtifact,
    JobState,
)
from morphit.formats.archive import ARCHIVE_FORMATS
from morphit.formats.image import IMAGE_FORMATS, MERGED_PDF
from morphit.formats.models import Domain


def _job() -> ConversionJob:
    service = ConversionService(BackendKind.IMAGE, IMAGE_FORMATS["png"])
    return ConversionJob((Path("a.jpg"),), service, None)


class TestConversionService:
    """Tests for ConversionService."""

    def test_merges_inputs(self):
        """PDF merge and archives consume every input in one job."""
        assert ConversionService(BackendKind.PDF, MERGED_PDF).merges_inputs
        assert ConversionService(BackendKind.ARCHIVE, ARCHIVE_FORMATS["zip"]).merges_inputs
        assert not ConversionService(BackendKind.IMAGE, IMAGE_FORMATS["png"]).merges_inputs

    def test_str(self):
        """str() shows kind and format id."""
        assert str(ConversionService(BackendKind.IMAGE, IMAGE_FORMATS["png"])) == "image:png"

    def test_pdf_kind_listed_with_images(self):
        """The merge backend is grouped with images."""
        assert BackendKind.PDF.domain is Domain.IMAGE
        assert BackendKind.MEDIA.domain is Domain.MEDIA


class TestConversionJob:
    """Tests for the job state machine."""

    def test_success_path(self, tmp_path):
        """A job goes queued, running, succeeded and stamps its artifacts."""
        job = _job()
        assert job.state is JobState.QUEUED
        job.start()
        assert job.state is JobState.RUNNING
        artifact = ConvertedArtifact((job.source,), tmp_path / "x.png", "a.png")
        job.succeed([artifact])
        assert job.state is JobState.SUCCEEDED
        assert artifact.output_format == "png"
        assert job.finished_at is not None

    def test_failure_records_error(self):
        """fail() keeps the error."""
        job = _job()
        job.start()
        error = ValueError("boom")
        job.fail(error)
        assert job.state is JobState.FAILED
        assert job.error is error

    def test_terminal_state_is_final(self):
        """A finished job cannot finish again."""
        job = _job()
        job.cancel()
        with pytest.raises(RuntimeError, match="already finished"):
            job.fail(ValueError("late"))


class TestResults:
    """Tests for records, progress and batch results."""

    def test_record_round_trip(self, tmp_path):
        """to_dict and from_dict are inverses."""
        record = ConversionRecord("a.md", "markdown", "a.pdf", "pdf", tmp_path / "a.pdf", 42)
        assert ConversionRecord.from_dict(record.to_dict()) == record

    def test_progress_fraction(self):
        """Fraction is zero for an empty batch."""
        assert BatchProgress().fraction == 0.0
        assert BatchProgress(current=1, total=4).fraction == 0.25

    def test_artifact_size_of_missing_file(self, tmp_path):
        """A missing temp file has size zero."""
        artifact = ConvertedArtifact((Path("a"),), tmp_path / "gone", "gone")
        assert artifact.size == 0

    def test_batch_result_flags(self):
        """success and cancelled reflect the jobs and error."""
        result = BatchResult()
        assert result.success
        job = _job()
        job.cancel()
        result.jobs.append(job)
        result.error = RuntimeError("stop")
        assert not result.success
        assert result.cancelled
