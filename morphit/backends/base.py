"""Base backend interface shared by every tool family."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.exceptions import (
    InvocationFailedError,
    KnownCause,
    KnownCauseError,
    NoOutputError,
)
from morphit.process.runner import CancellationToken, ProcessResult
from morphit.utils.logging import get_logger

if TYPE_CHECKING:
    from morphit.backends.locator import ToolHandle
    from morphit.core.runtime import Runtime
    from morphit.formats.models import Format

log = get_logger(__name__)

# A stderr substring, or several that must all appear
Needle = str | tuple[str, ...]


def stderr_matches(needle: Needle, stderr: str) -> bool:
    if isinstance(needle, str):
        return needle in stderr
    return all(part in stderr for part in needle)


@dataclass(frozen=True)
class IOPaths:
    """Input file(s) and output path of one tool invocation."""

    inputs: tuple[Path, ...]
    output: Path

    @property
    def input(self) -> Path:
        return self.inputs[0]

    @classmethod
    def single(cls, source: Path, output: Path) -> IOPaths:
        return cls((source,), output)


class Backend(ABC):
    """Abstract base class for conversion backends.

    Every backend turns a job into artifacts held in scratch space. Backends
    driving an external program derive from :class:`ToolBackend`; the
    library-driven ones (OCR, PDF merge) implement :meth:`convert` directly.
    """

    kind: ClassVar[BackendKind]

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime

    @abstractmethod
    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        """Execute ``job`` and return the artifacts it produced."""
        pass

    def output_for(self, source: Path, fmt: Format) -> tuple[Path, str]:
        """Allocate a temp output path named after ``source``."""
        name = f"{source.stem}{fmt.filename_suffix}"
        return self.runtime.temp.create_temp_file_named(name), name

    @contextmanager
    def discard_on_error(self, *paths: Path) -> Iterator[None]:
        """Remove ``paths`` from scratch space if the block raises."""
        try:
            yield
        except BaseException:
            for path in paths:
                self.runtime.temp.remove(path)
            raise


class ToolBackend(Backend):
    """A backend that shells out to an external program.

    It locates its tool, turns (format, options, paths) into an argument
    vector, runs it through the process runner and classifies the outcome.
    Subclasses declare what their tool's stderr means through
    ``known_causes`` (narrowed per output format by :meth:`known_causes_for`)
    and which non-zero exits are harmless through ``benign_exits``.
    """

    tool_names: ClassVar[tuple[str, ...]] = ()
    install_hint: ClassVar[str | None] = None
    bundled: ClassVar[bool] = False

    # (needle, cause), checked in order
    known_causes: ClassVar[tuple[tuple[Needle, KnownCause], ...]] = ()
    # (exit code, output format id) pairs downgraded to success when the
    # output file exists
    benign_exits: ClassVar[frozenset[tuple[int, str]]] = frozenset()

    def __init__(self, runtime: Runtime) -> None:
        super().__init__(runtime)
        self._handle: ToolHandle | None = None

    def locate(self, source: Path) -> ToolHandle:
        """Locate the backend's tool, caching the handle.

        Raises:
            ToolNotFoundError: If the tool is not installed
        """
        if self._handle is None:
            self._handle = self.runtime.locator.require(
                source, *self.tool_names, bundled=self.bundled, hint=self.install_hint
            )
        return self._handle

    @abstractmethod
    def build_args(self, fmt: Format, options: Any, paths: IOPaths) -> list[str]:
        """Build the tool's arguments, without the executable itself."""
        pass

    def known_causes_for(self, fmt: Format) -> Sequence[tuple[Needle, KnownCause]]:
        """The stderr markers that apply to output ``fmt``."""
        return self.known_causes

    async def run(
        self,
        handle: ToolHandle,
        args: Sequence[str],
        *,
        source: Path,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        token: CancellationToken | None = None,
    ) -> ProcessResult:
        """Run ``handle`` with ``args`` under process supervision."""
        return await self.runtime.runner.run(
            [str(handle.path), *args], source=source, env=env, cwd=cwd, token=token
        )

    def classify(
        self,
        result: ProcessResult,
        fmt: Format,
        source: Path,
        output: Path | None = None,
    ) -> None:
        """Turn a finished invocation into success or a typed error.

        Raises:
            KnownCauseError: If stderr names a recognized missing dependency
            InvocationFailedError: For any other non-zero exit
        """
        if result.exit_code == 0:
            return

        for needle, cause in self.known_causes_for(fmt):
            if stderr_matches(needle, result.stderr):
                log.warning("Recognized failure cause", cause=cause.value, tool=result.args[0])
                raise KnownCauseError(source, cause, result.stderr)

        if (
            output is not None
            and (result.exit_code, fmt.id) in self.benign_exits
            and output.exists()
            and output.stat().st_size > 0
        ):
            log.warning(
                "Tool exited with a benign error, keeping output",
                tool=result.args[0],
                exit_code=result.exit_code,
                format=fmt.id,
                stderr=result.stderr,
            )
            return

        log.error(
            "Tool invocation failed",
            tool=result.args[0],
            exit_code=result.exit_code,
            stderr=result.stderr,
        )
        raise InvocationFailedError(source, result.stderr, result.exit_code)

    async def invoke(
        self,
        fmt: Format,
        options: Any,
        paths: IOPaths,
        token: CancellationToken | None = None,
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> ProcessResult:
        """Locate, build, run and classify one invocation."""
        handle = self.locate(paths.input)
        args = self.build_args(fmt, options, paths)
        result = await self.run(handle, args, source=paths.input, env=env, cwd=cwd, token=token)
        self.classify(result, fmt, paths.input, paths.output)
        require_output(paths.output, paths.input)
        return result


def require_output(output: Path, source: Path) -> None:
    """Raise NoOutputError unless ``output`` exists."""
    if not output.exists():
        raise NoOutputError(source, f"No output was produced at {output.name}")
