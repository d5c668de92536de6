"""
Unit tests for the config module.

Tests for Config path resolution, placeholder substitution and YAML loading.
"""

from pathlib import Path

import pytest
from pydantic import SecretStr

from src.configs import config as config_module
from src.configs.config import Config, load_yaml_config, substitute_settings
from src.configs.settings import Settings


@pytest.fixture
def fake_settings(monkeypatch):
    """Replace the module settings used for substitution."""
    settings = Settings(
        _env_file=None,
        LOG_LEVEL="DEBUG",
        MIXPANEL_API_SECRET=SecretStr("s3cret"),
        MIXPANEL_DATA_URL="http://data.test/export",
        REQUEST_TIMEOUT=None,
    )
    monkeypatch.setattr(config_module, "settings", settings)
    return settings


class TestConfigPaths:
    """Tests for Config path attributes."""

    def test_ingestion_config_path(self):
        """INGESTION_CONFIG_PATH should point to the bundled YAML."""
        assert isinstance(Config.INGESTION_CONFIG_PATH, Path)
        assert Config.INGESTION_CONFIG_PATH.name == "ingestion.yaml"
        assert Config.INGESTION_CONFIG_PATH.exists()

    def test_bundled_config_has_sources(self):
        """Bundled config should define the mixpanel source."""
        config = load_yaml_config(Config.INGESTION_CONFIG_PATH)
        assert "mixpanel" in config["sources"]
        assert config["sources"]["mixpanel"]["properties"]["schemaByEvents"] == "on"


class TestSubstituteSettings:
    """Tests for substitute_settings."""

    def test_replaces_values(self, fake_settings):
        """Should replace known placeholders."""
        assert substitute_settings("level: ${LOG_LEVEL}") == "level: DEBUG"

    def test_unwraps_secrets(self, fake_settings):
        """Should insert the secret value itself."""
        assert substitute_settings("${MIXPANEL_API_SECRET}") == "s3cret"

    def test_none_becomes_empty(self, fake_settings):
        """Should replace unset values with an empty string."""
        assert substitute_settings("t: '${REQUEST_TIMEOUT}'") == "t: ''"

    def test_unknown_placeholder_kept(self, fake_settings):
        """Should leave unknown placeholders untouched."""
        assert substitute_settings("${NOT_A_SETTING}") == "${NOT_A_SETTING}"


class TestLoadYamlConfig:
    """Tests for load_yaml_config."""

    def test_missing_file(self, tmp_path):
        """Should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        """Should return an empty dict for an empty file."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_substitutes_before_parsing(self, tmp_path, fake_settings):
        """Should parse the substituted content."""
        path = tmp_path / "ingestion.yaml"
        path.write_text("sources:\n  mixpanel:\n    properties:\n      mixPanelDataUrl: ${MIXPANEL_DATA_URL}\n")

        config = load_yaml_config(path)

        assert config["sources"]["mixpanel"]["properties"]["mixPanelDataUrl"] == "http://data.test/export"
