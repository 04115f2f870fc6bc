"""Process lifecycle manager: no child outlives its job or the application."""

from __future__ import annotations

import asyncio
import atexit
import math
import os
import queue
import signal
import subprocess
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

from morphit.config.constants import DEFAULT_GRACE_PERIOD, DEFAULT_POLL_INTERVAL
from morphit.utils.logging import get_logger

log = get_logger(__name__)

# (returncode, stdout, stderr)
ExitStatus = tuple[int, str, str]


class ManagedProcess:
    """A live handle on a spawned external process.

    :meth:`watch` starts a waiter thread that drains the pipes and publishes
    the exit status on an asyncio future, so nothing has to poll for
    completion.
    """

    def __init__(self, popen: subprocess.Popen, tool: str) -> None:
        self.popen = popen
        self.tool = tool
        self._exited = threading.Event()
        self._interrupted = threading.Event()
        self._watcher: threading.Thread | None = None

    @property
    def pid(self) -> int:
        return self.popen.pid

    @property
    def is_running(self) -> bool:
        if self._exited.is_set():
            return False
        return self.popen.poll() is None

    @property
    def interrupted(self) -> bool:
        """Whether a cancel or shutdown sweep stopped this process."""
        return self._interrupted.is_set()

    def watch(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future[ExitStatus]:
        """Start the waiter thread and return the future it resolves."""
        future: asyncio.Future[ExitStatus] = loop.create_future()

        def wait() -> None:
            try:
                stdout, stderr = self.popen.communicate()
                outcome: ExitStatus | BaseException = (
                    self.popen.returncode,
                    stdout or "",
                    stderr or "",
                )
            except BaseException as e:  # delivered to the awaiting task
                outcome = e
            finally:
                self._exited.set()
            try:
                loop.call_soon_threadsafe(_resolve, future, outcome)
            except RuntimeError:
                # Event loop already closed; nobody is waiting any more
                pass

        self._watcher = threading.Thread(
            target=wait, name=f"wait-{self.tool}-{self.pid}", daemon=True
        )
        self._watcher.start()
        return future

    def mark_interrupted(self) -> None:
        self._interrupted.set()

    def send_signal(self, sig: int) -> None:
        try:
            self.popen.send_signal(sig)
        except ProcessLookupError:
            pass

    def wait_exit(self, timeout: float | None = None) -> bool:
        """Block until the process exits or ``timeout`` elapses."""
        if self._watcher is not None:
            return self._exited.wait(timeout)
        try:
            self.popen.wait(timeout)
        except subprocess.TimeoutExpired:
            return False
        return True

    def force_terminate(self) -> None:
        """SIGTERM, then block until the process is gone."""
        self.send_signal(signal.SIGTERM)
        self.wait_exit()

    def __repr__(self) -> str:
        return f"ManagedProcess(tool={self.tool!r}, pid={self.pid})"


def _resolve(future: asyncio.Future[ExitStatus], outcome: ExitStatus | BaseException) -> None:
    if future.done():
        return
    if isinstance(outcome, BaseException):
        future.set_exception(outcome)
    else:
        future.set_result(outcome)


def stop_processes(
    processes: Iterable[ManagedProcess],
    grace_period: float = DEFAULT_GRACE_PERIOD,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """Interrupt processes, escalating to SIGTERM after the grace window.

    SIGINT goes to every process at once, so the grace window is shared
    rather than paid once per process.
    """
    processes = list(processes)
    for process in processes:
        process.mark_interrupted()

    live = [process for process in processes if process.is_running]
    for process in live:
        log.debug("Sending SIGINT", tool=process.tool, pid=process.pid)
        process.send_signal(signal.SIGINT)

    for _ in range(max(1, math.ceil(grace_period / poll_interval))):
        live = [process for process in live if process.is_running]
        if not live:
            return
        time.sleep(poll_interval)

    for process in live:
        if process.is_running:
            log.warning("Process ignored SIGINT, terminating", tool=process.tool, pid=process.pid)
            process.force_terminate()


class ProcessManager:
    """Registry of every running child process.

    Runners register a process before waiting on it and unregister it on
    every exit path. :meth:`terminate_all` is the shutdown sweep; it is
    wired to SIGINT/SIGTERM by :meth:`install_signal_handlers`, whose
    handlers only enqueue the signal number for a sweeper thread.
    """

    def __init__(
        self,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.grace_period = grace_period
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        self._active: dict[int, ManagedProcess] = {}
        self._shutdown = threading.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._signals: queue.SimpleQueue[int | None] = queue.SimpleQueue()
        self._sweeper: threading.Thread | None = None
        self._previous_handlers: dict[int, Any] = {}
        self._swept: set[int] = set()

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._active)

    def active(self) -> list[ManagedProcess]:
        with self._lock:
            return list(self._active.values())

    @property
    def shutting_down(self) -> bool:
        return self._shutdown.is_set()

    def register(self, process: ManagedProcess) -> None:
        with self._lock:
            self._active[id(process)] = process
        log.debug("Process registered", tool=process.tool, pid=process.pid)

    def unregister(self, process: ManagedProcess) -> bool:
        """Forget ``process``; returns False if it was not registered."""
        with self._lock:
            removed = self._active.pop(id(process), None) is not None
        if removed:
            log.debug("Process unregistered", tool=process.tool, pid=process.pid)
        return removed

    def terminate(self, process: ManagedProcess) -> None:
        """Stop one process with the SIGINT-then-SIGTERM protocol."""
        stop_processes([process], self.grace_period, self.poll_interval)

    def terminate_all(self) -> None:
        """Stop every registered process.

        When this returns, no process that was registered is still running.
        """
        with self._lock:
            processes = list(self._active.values())
            self._active.clear()
        if not processes:
            return
        log.info("Terminating child processes", count=len(processes))
        stop_processes(processes, self.grace_period, self.poll_interval)

    def add_shutdown_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after the shutdown sweep (e.g. temp cleanup)."""
        self._callbacks.append(callback)

    def shutdown(self) -> None:
        """Refuse new processes, stop running ones, then run callbacks."""
        self._shutdown.set()
        self.terminate_all()
        for callback in self._callbacks:
            try:
                callback()
            except Exception as e:
                log.error("Shutdown callback failed", callback=repr(callback), error=str(e))

    def install_signal_handlers(
        self, signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)
    ) -> None:
        """Route shutdown signals to the sweeper thread.

        Must be called from the main thread.
        """
        if self._sweeper is not None:
            return
        self._sweeper = threading.Thread(
            target=self._sweep_loop, name="process-sweeper", daemon=True
        )
        self._sweeper.start()
        for signum in signals:
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)
        atexit.register(self.terminate_all)

    def uninstall_signal_handlers(self) -> None:
        """Restore the handlers replaced by :meth:`install_signal_handlers`."""
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous)
        self._previous_handlers.clear()
        self._swept.clear()
        atexit.unregister(self.terminate_all)
        if self._sweeper is not None:
            self._signals.put(None)
            self._sweeper.join(timeout=self.grace_period + 1.0)
            self._sweeper = None

    def _handle_signal(self, signum: int, frame: Any) -> None:
        if signum in self._swept:
            self._deliver_previous(signum, frame)
            return
        # SimpleQueue.put is reentrant; nothing else happens in signal context
        self._signals.put_nowait(signum)

    def _sweep_loop(self) -> None:
        while True:
            signum = self._signals.get()
            if signum is None:
                return
            if signum in self._swept:
                continue
            log.warning("Shutdown signal received", signal=signal.Signals(signum).name)
            self.shutdown()
            self._swept.add(signum)
            # Handlers run on the main thread, which restores and re-raises
            os.kill(os.getpid(), signum)

    def _deliver_previous(self, signum: int, frame: Any) -> None:
        previous = self._previous_handlers.pop(signum, signal.SIG_DFL)
        signal.signal(signum, previous)
        if callable(previous):
            previous(signum, frame)
        elif previous == signal.SIG_DFL:
            signal.raise_signal(signum)
