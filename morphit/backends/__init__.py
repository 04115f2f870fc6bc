"""Backend executors, one per external tool family.

Concrete backends are imported from their modules; the router owns the
kind-to-backend mapping.
"""

from morphit.backends.base import Backend, IOPaths, ToolBackend
from morphit.backends.locator import ToolHandle, ToolLocator

__all__ = [
    "Backend",
    "IOPaths",
    "ToolBackend",
    "ToolHandle",
    "ToolLocator",
]
