"""Configuration and saved preferences for avgdown.

Preferences live in ``~/.config/avgdown/config.toml`` (overridable with
the ``AVGDOWN_CONFIG`` environment variable). The engine never reads this
file; the CLI loads preferences and passes them in as plain numbers.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "avgdown" / "config.toml"

# Preference name -> default value (percent)
PREFERENCE_DEFAULTS = {
    "target_loss": 10.0,
    "monitor_target_loss": 10.0,
}

DEFAULT_LOG_LEVEL = "WARNING"


class ConfigError(Exception):
    """Raised when an existing config file cannot be safely updated."""


def get_config_path() -> Path:
    """Resolve the config file path."""
    override = os.environ.get("AVGDOWN_CONFIG")
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> Optional[dict]:
    """Load configuration.

    Args:
        path: Config file path (defaults to get_config_path()).

    Returns:
        Config dict or None if missing or unreadable.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return None

    try:
        return toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return None


def _section(config: Optional[dict], name: str) -> dict:
    section = (config or {}).get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring config [%s]: expected a table, got %r", name, section)
        return {}
    return section


def get_preference(name: str, config: Optional[dict] = None) -> float:
    """Get a saved preference, falling back to its default.

    Raises:
        KeyError: If name is not a known preference.
    """
    default = PREFERENCE_DEFAULTS[name]
    value = _section(config, "preferences").get(name)

    try:
        value = float(value) if value is not None else default
    except (TypeError, ValueError):
        logger.warning("Invalid saved %s %r, using %s", name, value, default)
        return default

    if not 0 <= value <= 100:
        logger.warning("Saved %s %s out of range, using %s", name, value, default)
        return default
    return value


def get_log_level(config: Optional[dict] = None) -> str:
    """Get the configured log level name."""
    level = _section(config, "logging").get("level", DEFAULT_LOG_LEVEL)
    return str(level).upper()


def _write_config(config: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(config, f)


def save_preference(name: str, value: float, path: Optional[Path] = None) -> Path:
    """Persist a preference.

    Args:
        name: Preference name (see PREFERENCE_DEFAULTS).
        value: Percentage in [0, 100].
        path: Config file path (defaults to get_config_path()).

    Returns:
        Path of the written config file.

    Raises:
        KeyError: If name is not a known preference.
        ValueError: If value is outside [0, 100].
        ConfigError: If the existing file cannot be parsed or its
            [preferences] entry is not a table. The file is left untouched.
    """
    if name not in PREFERENCE_DEFAULTS:
        raise KeyError(name)
    if not 0 <= value <= 100:
        raise ValueError(f"{name} must be between 0 and 100, got {value}")

    config_path = path or get_config_path()

    config = {}
    if config_path.exists():
        try:
            config = toml.load(config_path)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(
                f"Not saving {name}: cannot read {config_path} ({e}). "
                "Fix or remove the file first."
            ) from e

    preferences = config.setdefault("preferences", {})
    if not isinstance(preferences, dict):
        raise ConfigError(
            f"Not saving {name}: 'preferences' in {config_path} is not a table."
        )
    preferences[name] = float(value)
    _write_config(config, config_path)

    logger.debug("Saved %s=%s to %s", name, value, config_path)
    return config_path


def create_template_config(path: Optional[Path] = None) -> Path:
    """Create a template configuration file."""
    config_path = path or get_config_path()

    template = {
        "preferences": dict(PREFERENCE_DEFAULTS),
        "logging": {
            "level": DEFAULT_LOG_LEVEL,
        },
    }
    _write_config(template, config_path)

    return config_path
