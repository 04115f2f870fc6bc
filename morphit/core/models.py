"""Data classes describing conversion services, jobs and their results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from morphit.formats.models import Domain, Format


class BackendKind(str, Enum):
    """Backend families a service can be dispatched to."""

    DOCUMENT = "document"
    IMAGE = "image"
    MEDIA = "media"
    OCR = "ocr"
    SPEECH = "speech"
    ARCHIVE = "archive"
    PDF = "pdf"

    @property
    def domain(self) -> Domain:
        """Section the kind is listed under."""
        if self is BackendKind.PDF:
            return Domain.IMAGE
        return Domain(self.value)


@dataclass(frozen=True)
class ConversionService:
    """A (backend kind, output format) pair chosen by the caller."""

    kind: BackendKind
    format: Format

    @property
    def display_name(self) -> str:
        return self.format.display_name

    @property
    def merges_inputs(self) -> bool:
        """Whether all inputs are consumed by one job (merge, archive)."""
        return self.kind in (BackendKind.PDF, BackendKind.ARCHIVE)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.format.id}"


class JobState(str, Enum):
    """Lifecycle of a single conversion job."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED, JobState.CANCELLED)


@dataclass
class ConvertedArtifact:
    """A produced output file still owned by the temp file manager."""

    sources: tuple[Path, ...]
    temp_path: Path
    suggested_name: str
    output_format: str | None = None  # format id, stamped when its job succeeds

    @property
    def source(self) -> Path:
        return self.sources[0]

    @property
    def size(self) -> int:
        try:
            return self.temp_path.stat().st_size
        except OSError:
            return 0


@dataclass
class ConversionJob:
    """One execution of a service over one input (or one merged group)."""

    sources: tuple[Path, ...]
    service: ConversionService
    options: Any  # ConversionOptions; typed loosely to avoid an import cycle
    state: JobState = JobState.QUEUED
    artifacts: list[ConvertedArtifact] = field(default_factory=list)
    error: Exception | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def source(self) -> Path:
        return self.sources[0]

    def start(self) -> None:
        self.state = JobState.RUNNING
        self.started_at = datetime.now(UTC)

    def succeed(self, artifacts: list[ConvertedArtifact]) -> None:
        for artifact in artifacts:
            artifact.output_format = self.service.format.id
        self.artifacts = artifacts
        self._finish(JobState.SUCCEEDED)

    def fail(self, error: Exception) -> None:
        self.error = error
        self._finish(JobState.FAILED)

    def cancel(self, error: Exception | None = None) -> None:
        self.error = error
        self._finish(JobState.CANCELLED)

    def _finish(self, state: JobState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"Job for {self.source} already finished as {self.state.value}")
        self.state = state
        self.finished_at = datetime.now(UTC)


@dataclass
class ConversionRecord:
    """History entry emitted for each completed artifact."""

    input_name: str
    input_format: str
    output_name: str
    output_format: str
    output_path: Path
    size: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "input_name": self.input_name,
            "input_format": self.input_format,
            "output_name": self.output_name,
            "output_format": self.output_format,
            "output_path": str(self.output_path),
            "size": self.size,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversionRecord:
        """Create from dictionary."""
        return cls(
            input_name=data["input_name"],
            input_format=data["input_format"],
            output_name=data["output_name"],
            output_format=data["output_format"],
            output_path=Path(data["output_path"]),
            size=data["size"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class BatchProgress:
    """The (current, total) pair shown while a batch runs."""

    current: int = 0
    total: int = 0

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 0.0


@dataclass
class BatchResult:
    """Outcome of a batch: artifacts produced so far plus the first error."""

    artifacts: list[ConvertedArtifact] = field(default_factory=list)
    jobs: list[ConversionJob] = field(default_factory=list)
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def cancelled(self) -> bool:
        return any(job.state is JobState.CANCELLED for job in self.jobs)
