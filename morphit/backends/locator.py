"""External tool discovery."""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from morphit.config.constants import DEFAULT_TOOL_PREFIXES
from morphit.exceptions import ToolNotFoundError
from morphit.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ToolHandle:
    """A located executable."""

    name: str
    path: Path

    def __str__(self) -> str:
        return str(self.path)


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


class ToolLocator:
    """Finds executables on PATH, then in well-known install prefixes.

    Args:
        search_prefixes: Directories tried in order when PATH has no match
        bundle_dir: Application-bundled tool directory (ffmpeg/ffprobe); when
            set, bundled lookups never consult PATH
    """

    def __init__(
        self,
        search_prefixes: Sequence[str | Path] = DEFAULT_TOOL_PREFIXES,
        bundle_dir: str | Path | None = None,
    ) -> None:
        self.search_prefixes = [Path(prefix) for prefix in search_prefixes]
        self.bundle_dir = Path(bundle_dir) if bundle_dir else None

    def find(self, name: str) -> ToolHandle | None:
        """Locate ``name`` on PATH or under a search prefix."""
        found = shutil.which(name)
        if found:
            log.debug("Found tool on PATH", tool=name, path=found)
            return ToolHandle(name, Path(found))

        for prefix in self.search_prefixes:
            candidate = prefix / name
            if _is_executable(candidate):
                log.debug("Found tool in fallback location", tool=name, path=str(candidate))
                return ToolHandle(name, candidate)
            if candidate.exists():
                log.debug("File exists but is not executable", path=str(candidate))
        return None

    def find_bundled(self, name: str) -> ToolHandle | None:
        """Locate ``name`` in the bundled tool directory.

        Without a configured bundle this degrades to :meth:`find`.
        """
        if self.bundle_dir is None:
            return self.find(name)
        candidate = self.bundle_dir / name
        if _is_executable(candidate):
            log.debug("Found bundled tool", tool=name, path=str(candidate))
            return ToolHandle(name, candidate)
        return None

    def require(
        self,
        source: Path,
        *names: str,
        bundled: bool = False,
        hint: str | None = None,
    ) -> ToolHandle:
        """Return the first of ``names`` that can be located.

        Raises:
            ToolNotFoundError: If none of the names is found
        """
        lookup = self.find_bundled if bundled else self.find
        for name in names:
            handle = lookup(name)
            if handle is not None:
                return handle
        log.warning("Tool not found", tools=list(names))
        raise ToolNotFoundError(source, names[0], hint=hint)
