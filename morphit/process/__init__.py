"""External process supervision."""

from morphit.process.manager import ManagedProcess, ProcessManager, stop_processes
from morphit.process.runner import CancellationToken, ProcessResult, ProcessRunner

__all__ = [
    "CancellationToken",
    "ManagedProcess",
    "ProcessManager",
    "ProcessResult",
    "ProcessRunner",
    "stop_processes",
]
