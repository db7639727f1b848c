"""
Tests for configuration loading: defaults, YAML file, environment
overrides and validation.
"""

import os
import pytest

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from message_center.core.config import (
    MessageCenterConfig, apply_env_overrides, merge_configs, _parse_env_value
)
from message_center.core.types import ConfigurationError


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point CONFIG_DIR at an empty temp dir and run from there (no .env)."""
    monkeypatch.setenv("CONFIG_DIR", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("MESSAGE_CENTER_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestDefaults:
    def test_defaults(self):
        config = MessageCenterConfig()
        assert config.separator == " | "
        assert config.refresh_interval == 2.0
        assert config.spinner_interval == 0.22
        assert config.default_duration == 5.0
        assert config.audio_icon_timeout == 5.0
        assert config.speech_timeout == 30.0
        assert config.audio_icon_throttle == 20.0
        assert config.audio_icons["urgent"] == "low-low-high-low-strident"
        config.validate()

    def test_audio_icons_are_not_shared(self):
        first = MessageCenterConfig()
        first.audio_icons["low"] = "changed"
        assert MessageCenterConfig().audio_icons["low"] == "low-low-high-low"


class TestLoading:
    def test_load_without_file(self, config_dir):
        assert MessageCenterConfig.load() == MessageCenterConfig()

    def test_load_from_yaml(self, config_dir):
        (config_dir / "message_center.yaml").write_text(
            "refresh_interval: 3.5\n"
            "separator: ' - '\n"
            "audio_icons:\n"
            "  urgent: siren\n"
        )
        config = MessageCenterConfig.load()
        assert config.refresh_interval == 3.5
        assert config.separator == " - "
        assert config.audio_icons["urgent"] == "siren"
        assert config.audio_icons["low"] == "low-low-high-low"

    def test_environment_overrides_file(self, config_dir, monkeypatch):
        (config_dir / "message_center.yaml").write_text("speech_timeout: 10\n")
        monkeypatch.setenv("MESSAGE_CENTER_SPEECH_TIMEOUT", "12.5")
        monkeypatch.setenv("MESSAGE_CENTER_VERBOSE", "true")
        monkeypatch.setenv("MESSAGE_CENTER_AUDIO_ICONS__MEDIUM", "chime")

        config = MessageCenterConfig.load()
        assert config.speech_timeout == 12.5
        assert config.verbose is True
        assert config.audio_icons["medium"] == "chime"

    def test_dotenv_file(self, config_dir, monkeypatch):
        (config_dir / ".env").write_text("MESSAGE_CENTER_DEFAULT_DURATION=7\n")
        try:
            config = MessageCenterConfig.load()
        finally:
            # load_dotenv writes straight into os.environ
            os.environ.pop("MESSAGE_CENTER_DEFAULT_DURATION", None)
        assert config.default_duration == 7

    def test_invalid_yaml_falls_back_to_defaults(self, config_dir):
        (config_dir / "message_center.yaml").write_text("refresh_interval: [unclosed\n")
        assert MessageCenterConfig.load().refresh_interval == 2.0


class TestValidation:
    def test_negative_interval_rejected(self):
        with pytest.raises(ConfigurationError):
            MessageCenterConfig.from_dict({"refresh_interval": -1})

    def test_zero_spinner_interval_rejected(self):
        with pytest.raises(ConfigurationError):
            MessageCenterConfig(spinner_interval=0).validate()

    def test_missing_icon_rejected(self):
        config = MessageCenterConfig(audio_icons={"low": "a", "medium": "b"})
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_non_string_log_level_rejected(self, config_dir, monkeypatch):
        monkeypatch.setenv("MESSAGE_CENTER_LOG_LEVEL", "10")
        with pytest.raises(ConfigurationError):
            MessageCenterConfig.load()

    def test_non_string_separator_rejected(self):
        with pytest.raises(ConfigurationError):
            MessageCenterConfig.from_dict({"separator": 3})

    def test_unknown_keys_ignored(self):
        config = MessageCenterConfig.from_dict({"colour": "blue", "verbose": True})
        assert config.verbose is True


class TestHelpers:
    def test_parse_env_value(self):
        assert _parse_env_value("true") is True
        assert _parse_env_value("none") is None
        assert _parse_env_value("3") == 3
        assert _parse_env_value("0.5") == 0.5
        assert _parse_env_value("a, b") == ["a", "b"]
        assert _parse_env_value("text") == "text"

    def test_merge_configs_is_deep(self):
        merged = merge_configs({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1}

    def test_apply_env_overrides_nested(self, monkeypatch):
        monkeypatch.setenv("TESTPFX_SECTION__KEY", "5")
        result = apply_env_overrides({"section": {"other": 1}}, "TESTPFX")
        assert result["section"] == {"other": 1, "key": 5}
