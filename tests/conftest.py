"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from morphit.backends.locator import ToolHandle
from morphit.config.settings import MorphitSettings
from morphit.core.models import BackendKind, ConversionJob, ConversionService
from morphit.core.options import ConversionOptions
from morphit.core.runtime import Runtime
from morphit.formats.models import Format
from morphit.process.runner import ProcessResult

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(tmp_path: Path) -> MorphitSettings:
    """Settings with scratch space under tmp_path and a short grace window."""
    return MorphitSettings(
        log_dir=str(tmp_path / "logs"),
        temp={"root": str(tmp_path / "scratch")},
        process={"grace_period": 0.5, "poll_interval": 0.05},
        output={"default_dir": str(tmp_path / "out")},
    )


@pytest.fixture
def runtime(settings: MorphitSettings):
    """A runtime over the test settings, closed after the test."""
    rt = Runtime.from_settings(settings)
    yield rt
    rt.close()


@dataclass
class FakeOutcome:
    """Scripted result of one fake invocation."""

    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    # Write a small file at the invocation's output path
    write_output: bool = True
    action: Callable[[list[str]], None] | None = None


@dataclass
class FakeRunner:
    """Stands in for ProcessRunner: records argument vectors, scripts outcomes."""

    calls: list[dict[str, Any]] = field(default_factory=list)
    outcomes: list[FakeOutcome] = field(default_factory=list)

    def push(self, exit_code: int = 0, stdout: str = "", stderr: str = "", **kwargs: Any) -> None:
        self.outcomes.append(FakeOutcome(exit_code, stdout, stderr, **kwargs))

    @property
    def argvs(self) -> list[list[str]]:
        return [call["args"] for call in self.calls]

    async def run(self, args, *, source, env=None, cwd=None, token=None) -> ProcessResult:
        argv = [str(arg) for arg in args]
        self.calls.append({"args": argv, "env": env, "cwd": cwd, "source": source})
        outcome = self.outcomes.pop(0) if self.outcomes else FakeOutcome()
        if outcome.action is not None:
            outcome.action(argv)
        target = _output_argument(argv)
        if outcome.write_output and target is not None and target.parent.is_dir():
            target.write_bytes(b"converted")
        return ProcessResult(argv, outcome.exit_code, outcome.stdout, outcome.stderr)


def _output_argument(argv: list[str]) -> Path | None:
    """The output path of a tool invocation: after -o/-w, else the last argument."""
    for flag in ("-o", "-w"):
        if flag in argv[:-1]:
            return Path(argv[argv.index(flag) + 1])
    last = argv[-1]
    if last == os.devnull or not Path(last).is_absolute():
        return None
    return Path(last)


@pytest.fixture
def fake_runner(runtime: Runtime) -> FakeRunner:
    """Replace the runtime's process runner with a recording fake."""
    runner = FakeRunner()
    runtime.runner = runner  # type: ignore[assignment]
    return runner


@pytest.fixture
def fake_tools(runtime: Runtime, monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Make every tool lookup succeed with ``/fake/bin/<first name>``.

    Returns the list of names looked up, in order.
    """
    looked_up: list[str] = []

    def require(source, *names, bundled=False, hint=None):
        looked_up.append(names[0])
        return ToolHandle(names[0], Path("/fake/bin") / names[0])

    monkeypatch.setattr(runtime.locator, "require", require)
    return looked_up


@pytest.fixture
def sample_markdown_file(temp_dir: Path) -> Path:
    """Create a sample markdown file."""
    file_path = temp_dir / "report.md"
    file_path.write_text("# Report\n\nSome text.\n", encoding="utf-8")
    return file_path


@pytest.fixture
def sample_text_file(temp_dir: Path) -> Path:
    """Create a sample text file."""
    file_path = temp_dir / "notes.txt"
    file_path.write_text("Hello from morphit.\n", encoding="utf-8")
    return file_path


@pytest.fixture
def make_pdf(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing a PDF with one text line per page."""
    import fitz

    def _make(name: str = "doc.pdf", pages: list[str] | None = None) -> Path:
        path = temp_dir / name
        with fitz.open() as doc:
            for text in pages if pages is not None else ["Page one"]:
                page = doc.new_page()
                if text:
                    page.insert_text((72, 72), text)
            doc.save(path)
        return path

    return _make


@pytest.fixture
def make_job() -> Callable[..., ConversionJob]:
    """Factory for a queued job over one or more sources."""

    def _make(
        sources: Path | list[Path],
        kind: BackendKind,
        fmt: Format,
        options: ConversionOptions | None = None,
    ) -> ConversionJob:
        paths = tuple(sources) if isinstance(sources, list) else (sources,)
        return ConversionJob(paths, ConversionService(kind, fmt), options or ConversionOptions())

    return _make
