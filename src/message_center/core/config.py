"""
Configuration management for the message center.

Follows the same layering as the other services:
- Config file in config/ directory (message_center.yaml)
- .env file and environment variables override file values
- Dataclass defaults fill in anything left unset
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict
from dataclasses import dataclass, field, asdict
import yaml
from dotenv import load_dotenv

from .types import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_NAME = "message_center"
ENV_PREFIX = "MESSAGE_CENTER"

DEFAULT_AUDIO_ICONS = {
    "low": "low-low-high-low",
    "medium": "low-low-high-high",
    "urgent": "low-low-high-low-strident",
}


def load_env_file() -> None:
    """Load environment variables from a .env file, if there is one."""
    env_file = Path.cwd() / '.env'

    if env_file.exists():
        load_dotenv(env_file)
        logger.info(f"Loaded environment variables from {env_file}")
    else:
        # Also try looking one level up (if running from src/)
        env_file_alt = Path.cwd().parent / '.env'
        if env_file_alt.exists():
            load_dotenv(env_file_alt)
            logger.info(f"Loaded environment variables from {env_file_alt}")
        else:
            logger.debug("No .env file found. Using system environment variables or defaults.")


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_path = Path(os.getenv('CONFIG_DIR', 'config'))
    if not config_path.is_absolute():
        # Relative to project root (parent of src/)
        project_root = Path(__file__).resolve().parents[3]
        config_path = project_root / config_path

    return config_path


def load_yaml_config(config_name: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_name: Name of the config file (without .yaml extension)

    Returns:
        Dictionary with configuration values, empty dict if file not found
    """
    config_file = get_config_dir() / f"{config_name}.yaml"

    if not config_file.exists():
        logger.debug(f"Config file not found: {config_file}, using defaults")
        return {}

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {config_file}")
            return config
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config file {config_file}: {e}")
        return {}
    except OSError as e:
        logger.error(f"Error loading config file {config_file}: {e}")
        return {}


def merge_configs(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two configuration dictionaries."""
    result = defaults.copy()

    for key, value in overrides.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def apply_env_overrides(config: Dict[str, Any], prefix: str) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables are named {PREFIX}_{KEY} (uppercase); nested keys
    use a double underscore: {PREFIX}_{SECTION}__{KEY}.
    """
    result = config.copy()
    prefix_upper = prefix.upper()

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(f"{prefix_upper}_"):
            continue

        key_part = env_key[len(prefix_upper) + 1:]

        if '__' in key_part:
            parts = key_part.lower().split('__')
            current = result
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                else:
                    current[part] = dict(current[part])
                current = current[part]
            current[parts[-1]] = _parse_env_value(env_value)
        else:
            result[key_part.lower()] = _parse_env_value(env_value)

    return result


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable value to the appropriate type."""
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'

    if value.lower() in ('null', 'none', ''):
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    # List (comma-separated)
    if ',' in value and not value.startswith('['):
        return [v.strip() for v in value.split(',')]

    return value


@dataclass
class MessageCenterConfig:
    """Configuration for the display composer and announcement sequencer.

    All durations are in seconds.
    """
    # Display composition
    separator: str = " | "
    refresh_interval: float = 2.0
    spinner_interval: float = 0.22

    # Announcements
    default_duration: float = 5.0
    audio_icon_timeout: float = 5.0
    speech_timeout: float = 30.0
    audio_icon_throttle: float = 20.0
    audio_icons: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_AUDIO_ICONS))

    # Diagnostics
    verbose: bool = False
    log_level: str = "INFO"

    def validate(self) -> None:
        """Raise ConfigurationError if any value is unusable."""
        for name in ("refresh_interval", "spinner_interval", "default_duration",
                     "audio_icon_timeout", "speech_timeout", "audio_icon_throttle"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative number, got {value!r}")
        if self.spinner_interval == 0:
            raise ConfigurationError("spinner_interval must be greater than zero")
        for name in ("separator", "log_level"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigurationError(f"{name} must be a string, got {value!r}")
        missing = [key for key in DEFAULT_AUDIO_ICONS if not self.audio_icons.get(key)]
        if missing:
            raise ConfigurationError(f"audio_icons is missing entries for: {', '.join(missing)}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MessageCenterConfig':
        """Create a validated config, ignoring unknown keys."""
        defaults = cls()
        known = {name: data[name] for name in cls.__dataclass_fields__ if data.get(name) is not None}
        unknown = sorted(set(data) - set(cls.__dataclass_fields__))
        if unknown:
            logger.warning(f"Ignoring unknown message center settings: {unknown}")
        if 'audio_icons' in known:
            if not isinstance(known['audio_icons'], dict):
                raise ConfigurationError("audio_icons must be a mapping")
            known['audio_icons'] = merge_configs(defaults.audio_icons, known['audio_icons'])
        config = cls(**known)
        config.validate()
        return config

    @classmethod
    def load(cls) -> 'MessageCenterConfig':
        """Load message center configuration from file and environment."""
        load_env_file()

        file_config = load_yaml_config(CONFIG_NAME)
        config = apply_env_overrides(file_config, ENV_PREFIX)

        return cls.from_dict(config)
