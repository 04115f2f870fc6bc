"""Custom exceptions for morphit."""

from enum import Enum
from pathlib import Path


class MorphitError(Exception):
    """Base exception class for morphit."""

    pass


class ConfigurationError(MorphitError):
    """Configuration error."""

    pass


class OptionsValidationError(MorphitError):
    """Conversion options rejected for the selected format."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConversionError(MorphitError):
    """Error during a conversion job."""

    def __init__(self, file_path: Path, message: str, cause: Exception | None = None) -> None:
        self.file_path = file_path
        self.cause = cause
        self.detail = message
        super().__init__(f"Conversion failed for {file_path}: {message}")


class ToolNotFoundError(ConversionError):
    """The external tool backing a conversion could not be located."""

    def __init__(self, file_path: Path, tool: str, hint: str | None = None) -> None:
        message = f"{tool} is not installed or not found in PATH"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(file_path, message)
        self.tool = tool


class InvocationFailedError(ConversionError):
    """The external tool exited with an unrecognized failure."""

    def __init__(self, file_path: Path, stderr: str, exit_code: int | None = None) -> None:
        text = stderr.strip() or "Unknown error"
        super().__init__(file_path, f"exit code {exit_code}: {text}")
        self.stderr = stderr
        self.exit_code = exit_code


class KnownCause(str, Enum):
    """Failure causes recognized from a tool's diagnostic output."""

    LATEX_MISSING = "latex_missing"
    GHOSTSCRIPT_MISSING = "ghostscript_missing"
    POTRACE_MISSING = "potrace_missing"

    @property
    def message(self) -> str:
        return _KNOWN_CAUSE_MESSAGES[self]


_KNOWN_CAUSE_MESSAGES = {
    KnownCause.LATEX_MISSING: (
        "PDF generation requires LaTeX. Install TeX Live, BasicTeX or MacTeX"
    ),
    KnownCause.GHOSTSCRIPT_MISSING: (
        "Reading PDF files requires Ghostscript. Install it with your package manager"
    ),
    KnownCause.POTRACE_MISSING: (
        "Vectorizing to SVG requires Potrace. Install it with your package manager"
    ),
}


class KnownCauseError(ConversionError):
    """The tool failed for a cause recognized from its stderr."""

    def __init__(self, file_path: Path, cause: KnownCause, stderr: str = "") -> None:
        super().__init__(file_path, cause.message)
        self.known_cause = cause
        self.stderr = stderr


class VerificationFailedError(ConversionError):
    """Post-creation integrity check of an archive failed."""

    def __init__(self, file_path: Path, stderr: str) -> None:
        super().__init__(file_path, f"Archive verification failed: {stderr.strip()}")
        self.stderr = stderr


class ConversionCancelledError(ConversionError):
    """The conversion was cancelled before it finished."""

    def __init__(self, file_path: Path) -> None:
        super().__init__(file_path, "Cancelled")


class UnsupportedFormatCombinationError(ConversionError):
    """The requested output format cannot be produced from the input."""

    def __init__(self, file_path: Path, output: str) -> None:
        super().__init__(file_path, f"Cannot convert {file_path.suffix or 'input'} to {output}")
        self.output = output


class NoOutputError(ConversionError):
    """The tool reported success but produced nothing usable."""

    pass
