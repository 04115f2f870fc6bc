"""File system utilities for morphit."""

import shutil
from pathlib import Path

from morphit.utils.logging import get_logger

log = get_logger(__name__)


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(filename: str, max_length: int = 255) -> str:
    """Replace characters that are not valid in file names.

    Args:
        filename: Original filename
        max_length: Maximum filename length

    Returns:
        Safe filename
    """
    result = filename
    for char in '/\\:*?"<>|':
        result = result.replace(char, "_")
    result = result.replace("\0", "").strip(". ")

    if len(result) > max_length:
        suffix = Path(result).suffix
        result = Path(result).stem[: max_length - len(suffix)] + suffix

    return result


def get_unique_path(path: Path) -> Path:
    """Get a unique path by adding a counter suffix if path exists.

    ``report.pdf`` becomes ``report_1.pdf``, then ``report_2.pdf``.
    """
    if not path.exists():
        return path

    counter = 1
    while True:
        new_path = path.parent / f"{path.stem}_{counter}{path.suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def move_file_safe(src: Path, dst: Path, overwrite: bool = False) -> Path:
    """Move a file, creating the destination directory.

    Raises:
        FileExistsError: If destination exists and overwrite is False
    """
    if dst.exists() and not overwrite:
        raise FileExistsError(f"Destination already exists: {dst}")

    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(dst))
    return dst


def format_size(size: int | float) -> str:
    """Format byte size as human-readable string."""
    size_f = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_f < 1024:
            return f"{size_f:.1f} {unit}"
        size_f /= 1024
    return f"{size_f:.1f} PB"
