import json
import logging
import os

import pytest

from geocircle.config import CONFIG_ENV_VAR, Settings, configure_logging, get_config_path, get_settings, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep GEOCIRCLE_* variables of the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith('GEOCIRCLE_'):
            monkeypatch.delenv(key)


class TestConfigFile:

    def test_config_path_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "custom.json"
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert get_config_path() == path

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "nope.json") == {}

    def test_invalid_json(self, tmp_path, caplog):
        path = tmp_path / "geocircle.json"
        path.write_text("{not json")
        with caplog.at_level(logging.WARNING, logger='geocircle.config'):
            assert load_config(path) == {}
        assert "Failed to load config" in caplog.text

    def test_non_object(self, tmp_path):
        path = tmp_path / "geocircle.json"
        path.write_text("[1, 2]")
        assert load_config(path) == {}


class TestGetSettings:

    def test_defaults(self, tmp_path):
        assert get_settings(tmp_path / "missing.json") == Settings()

    def test_file_values(self, tmp_path):
        path = tmp_path / "geocircle.json"
        path.write_text(json.dumps({'coordinate_precision': 4, 'default_before_layer': ''}))
        settings = get_settings(path)
        assert settings.coordinate_precision == 4
        assert settings.default_before_layer is None

    def test_env_overrides_file(self, monkeypatch, tmp_path):
        path = tmp_path / "geocircle.json"
        path.write_text(json.dumps({'hover_reset_delay_s': 1.0}))
        monkeypatch.setenv('GEOCIRCLE_HOVER_RESET_DELAY', '0.5')
        assert get_settings(path).hover_reset_delay_s == 0.5

    def test_invalid_env_value_falls_back(self, monkeypatch, tmp_path):
        monkeypatch.setenv('GEOCIRCLE_COORDINATE_PRECISION', 'lots')
        assert get_settings(tmp_path / "missing.json").coordinate_precision == 6

    def test_log_level_normalized(self, monkeypatch, tmp_path):
        monkeypatch.setenv('GEOCIRCLE_LOG_LEVEL', 'debug')
        assert get_settings(tmp_path / "missing.json").log_level == 'DEBUG'


class TestConfigureLogging:

    def test_explicit_level(self):
        logger = logging.getLogger('geocircle')
        previous = logger.level
        try:
            configure_logging('info')
            assert logger.level == logging.INFO
        finally:
            logger.setLevel(previous)
