"""Configuration settings for postkast using pydantic-settings."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic_core import ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from postkast.accounts.config import AccountConfig, ImapEndpoint, Tls, UsernamePassword
from postkast.defaults import CONFIG_FILE_ENV, ENV_NESTED_DELIMITER, ENV_PREFIX
from postkast.exceptions import ConfigError
from postkast.paths import get_config_path

logger = logging.getLogger(__name__)


def collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Build a nested override tree from POSTKAST_-prefixed variables.

    Only variables with at least one ``__`` separator are considered, e.g.
    ``POSTKAST_SERVERS__0__IMAP__HOST`` becomes
    ``{"servers": {"0": {"imap": {"host": ...}}}}``. Numeric keys address list items
    and are resolved by :func:`merge_overrides`.
    """
    overrides: dict[str, Any] = {}
    prefix_len = len(ENV_PREFIX)
    for key, value in environ.items():
        if not key.upper().startswith(ENV_PREFIX) or key.upper() == CONFIG_FILE_ENV:
            continue
        path = [part.lower() for part in key[prefix_len:].split(ENV_NESTED_DELIMITER)]
        if len(path) < 2 or not all(path):
            continue

        node = overrides
        for part in path[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigError(f"Conflicting environment overrides for '{key}'")
            node = child
        if isinstance(node.get(path[-1]), dict):
            raise ConfigError(f"Conflicting environment overrides for '{key}'")
        node[path[-1]] = value
    return overrides


def merge_overrides(base: Any, overrides: dict[str, Any], location: str = "") -> Any:
    """Deep-merge an override tree into configuration data, field by field.

    Lists are addressed by index; index ``len(list)`` appends a new entry.
    """
    if base is None and overrides and all(key.isdigit() for key in overrides):
        base = []

    if isinstance(base, list):
        merged_list = list(base)
        for key in sorted(overrides, key=lambda k: int(k) if k.isdigit() else -1):
            item_location = f"{location}.{key}" if location else key
            if not key.isdigit():
                raise ConfigError(f"Expected a list index at '{item_location}'")
            index = int(key)
            if index > len(merged_list):
                raise ConfigError(
                    f"List index out of range at '{item_location}' "
                    f"(only {len(merged_list)} entries configured)"
                )
            if index == len(merged_list):
                merged_list.append(None)
            merged_list[index] = _merge_value(merged_list[index], overrides[key], item_location)
        return merged_list

    merged = dict(base) if isinstance(base, dict) else {}
    for key, value in overrides.items():
        item_location = f"{location}.{key}" if location else key
        merged[key] = _merge_value(merged.get(key), value, item_location)
    return merged


def _merge_value(base: Any, value: Any, location: str) -> Any:
    if isinstance(value, dict):
        return merge_overrides(base, value, location)
    return value


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source that loads the YAML config file and applies env overrides.

    The file is looked up at:
    1. POSTKAST_CONFIG_FILE environment variable
    2. <platform preferences dir>/config.yaml

    A missing file yields no data. Nested ``POSTKAST_<A>__<B>...`` variables are then
    merged over the file data.
    """

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from the merged config."""
        data = self._load_config()
        field_value = data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from the merged config."""
        return self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load and cache the merged config."""
        if not hasattr(self, "_data"):
            data = self._read_yaml_file(get_config_path())
            overrides = collect_env_overrides(os.environ)
            if overrides:
                logger.debug("Applying environment overrides (keys=%s)", sorted(overrides))
                data = merge_overrides(data, overrides)
            self._data = data
        return self._data

    def _read_yaml_file(self, path: Path) -> dict[str, Any]:
        """Read YAML config from file with improved error messages."""
        logger.debug("Loading settings from %s", path)
        if not path.exists():
            return {}

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            error_msg = getattr(e, "problem", None) or str(e)
            raise ConfigError(
                f"Invalid YAML syntax: {error_msg}",
                file_path=str(path),
                line=mark.line + 1 if mark else None,
                col=mark.column + 1 if mark else None,
            ) from e
        except PermissionError as e:
            raise ConfigError(
                "Cannot read config file: permission denied",
                file_path=str(path),
            ) from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}", file_path=str(path)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Top level must be a mapping", file_path=str(path))
        return data


def _parse_validation_error(error: ValidationError) -> str:
    """Convert Pydantic ValidationError to user-friendly message."""
    errors = error.errors()
    if not errors:
        return "Unknown validation error"

    err = errors[0]
    loc = err.get("loc", ())
    msg = err.get("msg", "")
    error_type = err.get("type", "")
    field_name = ".".join(str(part) for part in loc)

    if error_type == "missing" and loc:
        return f"Missing required field '{field_name}'"

    if "credentials" in [str(part) for part in loc] and error_type == "value_error":
        # pydantic prefixes messages raised in validators with "Value error, "
        return f"Invalid credentials at '{field_name}': {msg.removeprefix('Value error, ')}"

    if loc:
        return f"Invalid value for '{field_name}': {msg}"

    return str(error)


class Settings(BaseSettings):
    """Application settings.

    Accounts are configured in YAML:
        servers:
          - name: "GMail"
            imap:
              host: "imap.google.com"
              tls:
                port: 993
            credentials:
              username: "user@gmail.com"
              password: "secret"

    Any field can be overridden from the environment, e.g.
    POSTKAST_SERVERS__0__CREDENTIALS__PASSWORD.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)

    servers: list[AccountConfig] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include the YAML config."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )


def load_settings() -> Settings:
    """Load settings from the config file and environment.

    Raises:
        ConfigError: If the config cannot be located, read, parsed or validated.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(_parse_validation_error(e)) from e
    except SettingsError as e:
        raise ConfigError(f"Invalid environment configuration: {e}") from e


def sample_settings() -> Settings:
    """Build the sample configuration printed for new users."""
    account = AccountConfig(
        name="GMail",
        imap=ImapEndpoint(host="imap.google.com", tls=Tls.default_imap()),
        credentials=UsernamePassword(username="username", password="password"),
    )
    return Settings.model_construct(servers=[account])


def dump_settings(settings: Settings) -> str:
    """Serialize settings to YAML in the config file's shape."""
    data = settings.model_dump(
        mode="json",
        exclude_none=True,
        context={"reveal_secrets": True},
    )
    return yaml.safe_dump(data, sort_keys=False)
