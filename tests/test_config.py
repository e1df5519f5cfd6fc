"""
Tests for astrosonic/config.py

Run with: pytest tests/test_config.py -v
"""

import pytest

from astrosonic.config import CONFIG_ENV_VAR, Settings, load_settings
from astrosonic.errors import ConfigError


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        settings = load_settings()
        assert settings == Settings()
        assert settings.sample_rate == 44100
        assert settings.headroom == 0.8
        assert settings.default_genre == "ambient"

    def test_file_overrides(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("sample_rate: 22050\ndefault_genre: Jazz\n", encoding="utf-8")
        settings = load_settings(path)
        assert settings.sample_rate == 22050
        assert settings.default_genre == "jazz"
        assert settings.default_tempo == 120.0

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text("default_duration: 15\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_settings().default_duration == 15

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == Settings()

    @pytest.mark.parametrize("content", [
        "sample_rate: -1\n",
        "headroom: 2.0\n",
        "unknown_key: 1\n",
        "- just\n- a list\n",
        "sample_rate: [unclosed\n",
    ])
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "settings.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nope.yaml")
