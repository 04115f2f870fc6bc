"""Utility module for morphit."""

from morphit.utils.fs import (
    ensure_directory,
    format_size,
    get_unique_path,
    move_file_safe,
    safe_filename,
)

__all__ = [
    "ensure_directory",
    "format_size",
    "get_unique_path",
    "move_file_safe",
    "safe_filename",
]
