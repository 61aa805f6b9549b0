"""
Configuration management for tag synchronization.

Settings are stored as a TOML file in the config directory. Stored values
are merged over the defaults, so a partial or older file still loads.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import tomli_w

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "tagmatter.toml"
CONFIG_VERSION = 1


@dataclass
class Settings:
    """Sync settings.

    ``remove_inline_tags`` is persisted but inert: inline tags are never
    removed from the body.
    """
    auto_sync: bool = True
    lowercase_tags: bool = True
    remove_inline_tags: bool = False
    debounce_seconds: float = 2.0
    cooldown_seconds: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


SETTING_NAMES = tuple(f.name for f in fields(Settings))


def get_config_dir() -> Path:
    """Config directory: TAGMATTER_CONFIG_DIR, else ~/.tagmatter."""
    override = os.environ.get("TAGMATTER_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".tagmatter"


def config_path(config_dir: Optional[Path] = None) -> Path:
    """Path to the TOML config file."""
    return (config_dir or get_config_dir()) / CONFIG_FILENAME


def _coerce(name: str, value: Any) -> Any:
    """Check a stored value against the type of the setting's default."""
    default = getattr(Settings, name)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"Setting {name} must be true or false, got {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Setting {name} must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"Setting {name} must not be negative, got {value!r}")
    return float(value)


def load_settings(config_dir: Optional[Path] = None) -> Settings:
    """
    Load settings from the config directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    path = config_path(config_dir)

    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid config {path}: {e}") from e

    version = data.get("version", CONFIG_VERSION)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError(f"Invalid config {path}: version must be an integer, got {version!r}")
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    stored = data.get("sync", {})
    if not isinstance(stored, dict):
        raise ValueError(f"Invalid config {path}: [sync] must be a table, got {stored!r}")
    values = {}
    for name, value in stored.items():
        if name not in SETTING_NAMES:
            logger.debug("Ignoring unknown setting %r in %s", name, path)
            continue
        values[name] = _coerce(name, value)
    return Settings(**values)


def save_settings(settings: Settings, config_dir: Optional[Path] = None) -> Path:
    """
    Save settings to the config directory.

    Creates the directory if it doesn't exist.
    """
    path = config_path(config_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "version": CONFIG_VERSION,
        "sync": settings.to_dict(),
    }
    with open(path, "wb") as f:
        tomli_w.dump(data, f)
    return path


def load_or_create_settings(config_dir: Optional[Path] = None) -> Settings:
    """
    Load existing settings or create the file with defaults.

    This is the main entry point for config management.
    """
    if config_path(config_dir).exists():
        return load_settings(config_dir)
    settings = Settings()
    save_settings(settings, config_dir)
    return settings


_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


def set_setting(settings: Settings, name: str, raw: str) -> Settings:
    """Set one setting from its string form (as typed on the command line)."""
    if name not in SETTING_NAMES:
        raise ValueError(
            f"Unknown setting {name!r} (known: {', '.join(SETTING_NAMES)})"
        )
    if isinstance(getattr(Settings, name), bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            value: Any = True
        elif lowered in _FALSE:
            value = False
        else:
            raise ValueError(f"Setting {name} must be true or false, got {raw!r}")
    else:
        try:
            value = float(raw)
        except ValueError:
            raise ValueError(f"Setting {name} must be a number, got {raw!r}") from None
    setattr(settings, name, _coerce(name, value))
    return settings
