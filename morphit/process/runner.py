"""Supervised subprocess execution with cooperative cancellation."""

from __future__ import annotations

import asyncio
import subprocess
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import anyio

from morphit.exceptions import ConversionCancelledError, ToolNotFoundError
from morphit.process.manager import ManagedProcess, ProcessManager
from morphit.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class ProcessResult:
    """Exit status and captured output of one invocation."""

    args: list[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class CancellationToken:
    """Thread-safe cancel flag that asyncio code can await.

    ``cancel()`` may be called from any thread (a UI callback, a signal
    sweeper); every future handed out by :meth:`future` resolves at once.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            waiters, self._waiters = self._waiters, []
        log.debug("Cancellation requested", waiters=len(waiters))
        for loop, future in waiters:
            try:
                loop.call_soon_threadsafe(_set_done, future)
            except RuntimeError:
                pass

    def future(self) -> asyncio.Future[None]:
        """A future on the running loop that completes on cancel."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()
        with self._lock:
            if self._event.is_set():
                future.set_result(None)
            else:
                self._waiters.append((loop, future))
        return future

    def discard(self, future: asyncio.Future[None]) -> None:
        with self._lock:
            self._waiters = [(loop, f) for loop, f in self._waiters if f is not future]

    def raise_if_cancelled(self, file_path: Path) -> None:
        if self._event.is_set():
            raise ConversionCancelledError(file_path)


def _set_done(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)


class ProcessRunner:
    """Spawns external tools under the supervision of a :class:`ProcessManager`."""

    def __init__(self, manager: ProcessManager) -> None:
        self.manager = manager

    async def run(
        self,
        args: Sequence[str | Path],
        *,
        source: Path,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        token: CancellationToken | None = None,
    ) -> ProcessResult:
        """Run ``args`` to completion and capture its output.

        Args:
            args: Argument vector; ``args[0]`` is the executable path
            source: Input file the invocation works on, used in errors
            env: Full environment for the child, or None to inherit
            cwd: Working directory for the child
            token: Cancels the invocation when triggered

        Returns:
            ProcessResult, whatever the exit code

        Raises:
            ToolNotFoundError: If the executable cannot be spawned
            ConversionCancelledError: If the token fired or a shutdown sweep
                stopped the process
        """
        argv = [str(arg) for arg in args]
        if self.manager.shutting_down or (token is not None and token.cancelled):
            raise ConversionCancelledError(source)

        log.debug("Spawning process", args=argv, cwd=str(cwd) if cwd else None)
        try:
            popen = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=dict(env) if env is not None else None,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(source, Path(argv[0]).name) from e
        except PermissionError as e:
            hint = f"{argv[0]} is not executable"
            raise ToolNotFoundError(source, Path(argv[0]).name, hint=hint) from e

        process = ManagedProcess(popen, tool=Path(argv[0]).name)
        self.manager.register(process)
        try:
            exited = process.watch(asyncio.get_running_loop())
            cancelled = token.future() if token is not None else None
            waiters: set[asyncio.Future] = {exited} if cancelled is None else {exited, cancelled}
            try:
                await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            except asyncio.CancelledError:
                log.info("Task cancelled, stopping process", tool=process.tool, pid=process.pid)
                await self._stop(process)
                raise
            finally:
                if cancelled is not None and token is not None:
                    token.discard(cancelled)
                    cancelled.cancel()

            if not exited.done():
                log.info("Cancelling process", tool=process.tool, pid=process.pid)
                await self._stop(process)
                raise ConversionCancelledError(source)

            exit_code, stdout, stderr = exited.result()
            if process.interrupted:
                raise ConversionCancelledError(source)

            log.debug("Process exited", tool=process.tool, exit_code=exit_code)
            return ProcessResult(args=argv, exit_code=exit_code, stdout=stdout, stderr=stderr)
        finally:
            self.manager.unregister(process)

    async def _stop(self, process: ManagedProcess) -> None:
        # Escalation must finish even if the task is cancelled again
        await asyncio.shield(anyio.to_thread.run_sync(self.manager.terminate, process))
