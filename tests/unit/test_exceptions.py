"""Tests for custom exceptions."""

from pathlib import Path

from morphit.exceptions import (
    ConversionCancelledError,
    ConversionError,
    InvocationFailedError,
    KnownCause,
    KnownCauseError,
    MorphitError,
    OptionsValidationError,
    ToolNotFoundError,
    UnsupportedFormatCombinationError,
    VerificationFailedError,
)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    def test_conversion_errors_share_base(self):
        """Every per-file failure is a ConversionError and a MorphitError."""
        for error in (
            ToolNotFoundError(Path("a"), "pandoc"),
            InvocationFailedError(Path("a"), "boom", 1),
            KnownCauseError(Path("a"), KnownCause.LATEX_MISSING),
            VerificationFailedError(Path("a"), "bad crc"),
            ConversionCancelledError(Path("a")),
            UnsupportedFormatCombinationError(Path("a.mp3"), "DOCX"),
        ):
            assert isinstance(error, ConversionError)
            assert isinstance(error, MorphitError)

    def test_options_error_is_not_per_file(self):
        """Option validation happens before any file is touched."""
        error = OptionsValidationError("bad", field="image.quality")
        assert not isinstance(error, ConversionError)
        assert error.field == "image.quality"


class TestMessages:
    """Tests for exception messages."""

    def test_conversion_error_message(self):
        """The message names the file; detail keeps the bare reason."""
        error = ConversionError(Path("/tmp/a.md"), "broken", cause=ValueError("x"))
        assert str(error) == "Conversion failed for /tmp/a.md: broken"
        assert error.detail == "broken"
        assert isinstance(error.cause, ValueError)

    def test_tool_not_found_with_hint(self):
        """The install hint is appended."""
        error = ToolNotFoundError(Path("a.md"), "pandoc", hint="brew install pandoc")
        assert error.tool == "pandoc"
        assert error.detail == "pandoc is not installed or not found in PATH. brew install pandoc"

    def test_invocation_failed_empty_stderr(self):
        """Empty stderr falls back to a generic reason."""
        error = InvocationFailedError(Path("a"), "  \n", exit_code=2)
        assert error.detail == "exit code 2: Unknown error"
        assert error.exit_code == 2

    def test_known_cause_message(self):
        """Known causes carry an actionable message."""
        error = KnownCauseError(Path("a.md"), KnownCause.LATEX_MISSING, "pdflatex not found")
        assert "LaTeX" in error.detail
        assert error.known_cause is KnownCause.LATEX_MISSING
        assert error.stderr == "pdflatex not found"

    def test_unsupported_combination(self):
        """The message shows the input suffix and the requested output."""
        error = UnsupportedFormatCombinationError(Path("song.mp3"), "DOCX")
        assert error.detail == "Cannot convert .mp3 to DOCX"
        assert error.output == "DOCX"

    def test_cancelled(self):
        """Cancellation has a fixed detail."""
        assert ConversionCancelledError(Path("a")).detail == "Cancelled"
