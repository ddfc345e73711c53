"""
Unit tests for the settings loader.
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from refgraph.config import load_settings, resolve_settings_path
from refgraph.models import EngineSettings


class TestLoadSettings:
    """Test load_settings."""

    def test_load_partial_settings(self, tmp_path):
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text(
            yaml.dump({"suggestions": {"shuffle_seed": 7}, "authors": {"merge_abbreviated_names": True}})
        )

        settings = load_settings(str(settings_file))

        assert settings.suggestions.shuffle_seed == 7
        assert settings.authors.merge_abbreviated_names is True
        assert settings.pagination.load_more_increment == 100
        assert settings.scoring.first_author_boost == 2

    def test_empty_file_gives_defaults(self, tmp_path):
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text("")

        assert load_settings(str(settings_file)) == EngineSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(str(tmp_path / "nonexistent.yaml"))

    def test_non_mapping_root(self, tmp_path):
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            load_settings(str(settings_file))

    def test_invalid_value(self, tmp_path):
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text(yaml.dump({"concepts": {"max_attributes": 64}}))

        with pytest.raises(ValidationError):
            load_settings(str(settings_file))

    def test_repository_settings_file(self):
        settings = load_settings(str(Path(__file__).resolve().parents[2] / "config" / "settings.yaml"))

        assert settings == EngineSettings()


class TestResolveSettingsPath:
    def test_explicit_path_wins(self, monkeypatch):
        monkeypatch.setenv("REFGRAPH_SETTINGS", "/env/settings.yaml")

        assert resolve_settings_path("custom.yaml") == "custom.yaml"

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("REFGRAPH_SETTINGS", "/env/settings.yaml")

        assert resolve_settings_path() == "/env/settings.yaml"

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("REFGRAPH_SETTINGS", raising=False)

        assert resolve_settings_path() == "config/settings.yaml"
