"""Preference path helpers."""

import os
from pathlib import Path

import platformdirs

from postkast.defaults import CONFIG_FILE_ENV, CONFIG_FILE_NAME
from postkast.exceptions import ConfigError

APP_NAME = "Postkast"
APP_AUTHOR = "postkast"


def get_preferences_dir() -> Path:
    """Get the platform-specific preferences directory.

    Raises:
        ConfigError: If the directory cannot be determined (e.g. no home directory).
    """
    try:
        return Path(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR))
    except (KeyError, RuntimeError, OSError) as e:
        raise ConfigError(f"Cannot locate preferences directory: {e}") from e


def get_config_path() -> Path:
    """Get the configuration file path.

    POSTKAST_CONFIG_FILE wins over the file in the preferences directory.
    """
    explicit = os.environ.get(CONFIG_FILE_ENV)
    if explicit:
        return Path(explicit)
    return get_preferences_dir() / CONFIG_FILE_NAME
