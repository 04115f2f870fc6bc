"""morphit - file format conversion engine."""

__version__ = "0.1.0"
