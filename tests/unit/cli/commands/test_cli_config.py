"""Tests for the config command."""

from unittest.mock import patch

import yaml
from typer.testing import CliRunner

from morphit.cli.commands.config import DEFAULT_CONFIG_TEMPLATE, config_app
from morphit.config.settings import MorphitSettings


class TestConfigInit:
    """Tests for `morphit config init`."""

    def test_creates_file(self, tmp_path):
        """The template is written to --path."""
        config_path = tmp_path / "morphit.yaml"

        result = CliRunner().invoke(config_app, ["init", "--path", str(config_path)])

        assert result.exit_code == 0
        assert config_path.read_text(encoding="utf-8") == DEFAULT_CONFIG_TEMPLATE

    def test_existing_file(self, tmp_path):
        """An existing file is kept unless --force is given."""
        config_path = tmp_path / "morphit.yaml"
        config_path.write_text("log_level: DEBUG\n")

        result = CliRunner().invoke(config_app, ["init", "--path", str(config_path)])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert config_path.read_text() == "log_level: DEBUG\n"

    def test_force(self, tmp_path):
        """--force overwrites."""
        config_path = tmp_path / "morphit.yaml"
        config_path.write_text("log_level: DEBUG\n")

        result = CliRunner().invoke(
            config_app, ["init", "--path", str(config_path), "--force"]
        )

        assert result.exit_code == 0
        assert config_path.read_text(encoding="utf-8") == DEFAULT_CONFIG_TEMPLATE

    def test_template_is_valid_settings(self):
        """Every key in the template is a known setting."""
        data = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)

        settings = MorphitSettings.model_validate(data)

        assert settings.process.grace_period == 1.0
        assert settings.output.on_conflict == "rename"


class TestConfigShow:
    """Tests for `morphit config show`."""

    def test_show(self, settings):
        """The effective values are printed."""
        with patch("morphit.cli.commands.config.get_settings", return_value=settings):
            result = CliRunner().invoke(config_app, ["show"])

        assert result.exit_code == 0
        assert "Grace Period" in result.output
        assert "0.5s" in result.output


class TestConfigLocations:
    """Tests for `morphit config locations`."""

    def test_lists_locations(self, tmp_path):
        """Each search location is shown with its status."""
        config_path = tmp_path / "morphit.yaml"
        config_path.touch()
        locations = [config_path, tmp_path / "missing.yaml"]

        with patch("morphit.cli.commands.config.CONFIG_LOCATIONS", locations):
            result = CliRunner().invoke(config_app, ["locations"])

        assert result.exit_code == 0
        assert "exists" in result.output
        assert "not found" in result.output
