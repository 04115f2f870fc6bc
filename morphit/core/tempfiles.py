"""Scratch file and directory lifecycle."""

import shutil
import tempfile
import threading
import uuid
from pathlib import Path

from morphit.config.constants import TEMP_SUBDIR
from morphit.utils.logging import get_logger

log = get_logger(__name__)


class TempFileManager:
    """Allocates scratch paths and guarantees their removal.

    Every allocated path is tracked until it is either removed or handed over
    to a caller with :meth:`untrack`. The tracked set is guarded by a lock
    because jobs, shutdown sweeps and signal-driven cleanup all touch it.
    """

    def __init__(self, root: Path | str | None = None) -> None:
        base = Path(root) if root is not None else Path(tempfile.gettempdir())
        self.root = base / TEMP_SUBDIR
        self._lock = threading.Lock()
        self._tracked: set[Path] = set()

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._tracked)

    def is_tracked(self, path: Path) -> bool:
        with self._lock:
            return path in self._tracked

    def tracked_paths(self) -> list[Path]:
        with self._lock:
            return sorted(self._tracked)

    def create_temp_file(self, extension: str) -> Path:
        """Allocate a unique scratch file path.

        The file itself is not created; the tool writing the output does.

        Args:
            extension: File extension without the dot

        Returns:
            Tracked path ``<root>/<uuid>.<extension>``
        """
        self.root.mkdir(parents=True, exist_ok=True)
        name = uuid.uuid4().hex
        path = self.root / (f"{name}.{extension.lstrip('.')}" if extension else name)
        self.track(path)
        return path

    def create_temp_directory(self) -> Path:
        """Create and track a unique scratch directory."""
        path = self.root / uuid.uuid4().hex
        path.mkdir(parents=True)
        self.track(path)
        return path

    def create_temp_file_named(self, name: str) -> Path:
        """Allocate ``name`` inside a fresh scratch directory.

        Both the directory and the file path are tracked, so the output keeps
        a human-readable name without colliding with other jobs.
        """
        path = self.create_temp_directory() / name
        self.track(path)
        return path

    def track(self, path: Path) -> None:
        with self._lock:
            self._tracked.add(path)

    def untrack(self, path: Path) -> None:
        """Stop tracking ``path`` and its parent directory without deleting them."""
        with self._lock:
            self._tracked.discard(path)
            self._tracked.discard(path.parent)

    def release(self, path: Path) -> None:
        """Untrack ``path`` after its owner moved it out of scratch space.

        The scratch directory it lived in is deleted once empty; while it
        still holds siblings (other pages of the same export) it stays
        tracked.
        """
        parent = path.parent
        with self._lock:
            parent_tracked = parent in self._tracked
        self.untrack(path)
        if parent_tracked and parent.is_dir():
            if any(parent.iterdir()):
                self.track(parent)
            else:
                parent.rmdir()

    def remove(self, path: Path) -> None:
        """Delete ``path`` and stop tracking it.

        Removing a directory untracks everything below it. A tracked parent
        directory left empty by the removal is deleted too.
        """
        _delete(path)
        with self._lock:
            self._tracked = {p for p in self._tracked if not p.is_relative_to(path)}
            parent_tracked = path.parent in self._tracked
        if parent_tracked and path.parent.is_dir() and not any(path.parent.iterdir()):
            path.parent.rmdir()
            with self._lock:
                self._tracked.discard(path.parent)

    def cleanup(self) -> None:
        """Delete every tracked path still on disk and clear the set."""
        with self._lock:
            paths = list(self._tracked)
            self._tracked.clear()

        # Children before parents
        for path in sorted(paths, key=lambda p: len(p.parts), reverse=True):
            try:
                _delete(path)
            except OSError as e:
                log.warning("Failed to remove temp path", path=str(path), error=str(e))

        if paths:
            log.debug("Temp files cleaned up", count=len(paths))


def _delete(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
