"""Tests for external tool discovery."""

from pathlib import Path

import pytest

from morphit.backends.locator import ToolHandle, ToolLocator
from morphit.exceptions import ToolNotFoundError


def _tool(directory: Path, name: str, executable: bool = True) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755 if executable else 0o644)
    return path


@pytest.fixture
def empty_path(monkeypatch, tmp_path):
    """PATH pointing at an empty directory."""
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))


class TestFind:
    """Tests for ToolLocator.find."""

    def test_found_on_path(self, monkeypatch, tmp_path):
        """PATH is searched first."""
        tool = _tool(tmp_path / "bin", "pandoc")
        monkeypatch.setenv("PATH", str(tmp_path / "bin"))

        handle = ToolLocator([]).find("pandoc")

        assert handle == ToolHandle("pandoc", tool)

    def test_fallback_prefix(self, empty_path, tmp_path):
        """Well-known prefixes are tried in order when PATH has no match."""
        second = _tool(tmp_path / "second", "magick")
        locator = ToolLocator([tmp_path / "first", tmp_path / "second"])

        assert locator.find("magick").path == second

    def test_skips_non_executable(self, empty_path, tmp_path):
        """A file without the execute bit is not a tool."""
        _tool(tmp_path / "first", "magick", executable=False)
        second = _tool(tmp_path / "second", "magick")
        locator = ToolLocator([tmp_path / "first", tmp_path / "second"])

        assert locator.find("magick").path == second

    def test_not_found(self, empty_path, tmp_path):
        """None when nothing matches."""
        assert ToolLocator([tmp_path]).find("pandoc") is None


class TestBundled:
    """Tests for bundled tool lookup."""

    def test_bundle_dir_only(self, monkeypatch, tmp_path):
        """A configured bundle is the only place bundled tools come from."""
        _tool(tmp_path / "path", "ffmpeg")
        monkeypatch.setenv("PATH", str(tmp_path / "path"))
        locator = ToolLocator([], bundle_dir=tmp_path / "bundle")

        assert locator.find_bundled("ffmpeg") is None

        bundled = _tool(tmp_path / "bundle", "ffmpeg")
        assert locator.find_bundled("ffmpeg").path == bundled

    def test_without_bundle_uses_path(self, monkeypatch, tmp_path):
        """No bundle means an ordinary lookup."""
        tool = _tool(tmp_path / "path", "ffprobe")
        monkeypatch.setenv("PATH", str(tmp_path / "path"))

        assert ToolLocator([]).find_bundled("ffprobe").path == tool


class TestRequire:
    """Tests for ToolLocator.require."""

    def test_first_available_name(self, empty_path, tmp_path):
        """Alternatives are tried in order."""
        _tool(tmp_path / "bin", "convert")
        locator = ToolLocator([tmp_path / "bin"])

        assert locator.require(Path("a.png"), "magick", "convert").name == "convert"

    def test_missing_raises_with_hint(self, empty_path, tmp_path):
        """The error names the preferred tool and carries the hint."""
        locator = ToolLocator([tmp_path])

        with pytest.raises(ToolNotFoundError) as exc_info:
            locator.require(Path("a.md"), "pandoc", hint="Install pandoc")

        assert exc_info.value.tool == "pandoc"
        assert "Install pandoc" in str(exc_info.value)
