"""Runtime context shared by the router, backends and batch driver."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from morphit.backends.locator import ToolLocator
from morphit.config.settings import MorphitSettings, get_settings
from morphit.core.tempfiles import TempFileManager
from morphit.formats.registry import FormatRegistry
from morphit.process.manager import ProcessManager
from morphit.process.runner import ProcessRunner
from morphit.utils.logging import get_logger

log = get_logger(__name__)

# Packaged ffmpeg/ffprobe directory used when no bundle is configured
PACKAGED_BIN_DIR = Path(__file__).resolve().parent.parent / "bin"


@dataclass
class Runtime:
    """Every long-lived collaborator of a conversion session.

    Built once per session and passed explicitly; nothing in the engine
    reaches for a module-level singleton.
    """

    settings: MorphitSettings
    registry: FormatRegistry
    processes: ProcessManager
    temp: TempFileManager
    runner: ProcessRunner
    locator: ToolLocator

    @classmethod
    def from_settings(cls, settings: MorphitSettings | None = None) -> Runtime:
        """Build a runtime from settings (the cached global ones by default)."""
        settings = settings or get_settings()
        processes = ProcessManager(
            grace_period=settings.process.grace_period,
            poll_interval=settings.process.poll_interval,
        )
        temp = TempFileManager(settings.temp.root)
        processes.add_shutdown_callback(temp.cleanup)

        bundle_dir = settings.tools.ffmpeg_dir
        if bundle_dir is None and PACKAGED_BIN_DIR.is_dir():
            bundle_dir = str(PACKAGED_BIN_DIR)

        log.debug("Runtime created", temp_root=str(temp.root), ffmpeg_dir=bundle_dir)
        return cls(
            settings=settings,
            registry=FormatRegistry(),
            processes=processes,
            temp=temp,
            runner=ProcessRunner(processes),
            locator=ToolLocator(settings.tools.search_prefixes, bundle_dir=bundle_dir),
        )

    def close(self) -> None:
        """Stop leftover processes and remove every tracked temp path."""
        self.processes.terminate_all()
        self.temp.cleanup()
