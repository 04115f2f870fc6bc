"""Tests for the runtime context."""

from morphit.config.settings import MorphitSettings
from morphit.core.runtime import Runtime


class TestRuntime:
    """Tests for Runtime construction and teardown."""

    def test_from_settings_wires_collaborators(self, settings, tmp_path):
        """Settings flow into the temp root and process timings."""
        runtime = Runtime.from_settings(settings)
        try:
            assert runtime.settings is settings
            assert runtime.temp.root == tmp_path / "scratch" / "morphit"
            assert runtime.processes.grace_period == 0.5
            assert runtime.runner.manager is runtime.processes
        finally:
            runtime.close()

    def test_configured_bundle_dir(self, tmp_path):
        """An explicit ffmpeg directory becomes the locator's bundle."""
        settings = MorphitSettings(
            temp={"root": str(tmp_path)}, tools={"ffmpeg_dir": str(tmp_path / "bin")}
        )
        runtime = Runtime.from_settings(settings)
        try:
            assert runtime.locator.bundle_dir == tmp_path / "bin"
        finally:
            runtime.close()

    def test_close_removes_temp_files(self, runtime):
        """close() cleans up everything still tracked."""
        path = runtime.temp.create_temp_file_named("x.txt")
        path.write_text("x")
        runtime.close()
        assert not path.exists()
        assert runtime.temp.active_count == 0

    def test_shutdown_runs_temp_cleanup(self, runtime):
        """The process manager's shutdown sweep also cleans scratch space."""
        path = runtime.temp.create_temp_file("bin")
        path.write_bytes(b"x")
        runtime.processes.shutdown()
        assert not path.exists()
        assert runtime.processes.shutting_down
