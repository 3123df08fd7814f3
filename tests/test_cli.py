"""Tests for the settings commands of the CLI."""
import pytest
from typer.testing import CliRunner

from streamchat.cli.app import app
from streamchat.settings import DEFAULT_ENDPOINT_URL, SettingsStore

runner = CliRunner()


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    monkeypatch.setenv("STREAMCHAT_SETTINGS_PATH", str(path))
    return path


class TestSettingsCommands:
    """Tests for `streamchat settings`."""

    def test_set_then_reset(self, settings_path):
        result = runner.invoke(app, ["settings", "set", "https://custom.test/v1"])
        assert result.exit_code == 0
        assert SettingsStore(settings_path).get_endpoint_url() == "https://custom.test/v1"

        result = runner.invoke(app, ["settings", "reset"])
        assert result.exit_code == 0
        assert SettingsStore(settings_path).get_endpoint_url() == DEFAULT_ENDPOINT_URL

    def test_blank_url_exits_with_error(self, settings_path):
        result = runner.invoke(app, ["settings", "set", "  "])
        assert result.exit_code == 1

    def test_show(self, settings_path):
        result = runner.invoke(app, ["settings", "show"])
        assert result.exit_code == 0
        assert "Settings" in result.output

    def test_models_lists_default(self):
        result = runner.invoke(app, ["models"])
        assert result.exit_code == 0
        assert "gemini-2.5-pro" in result.output
