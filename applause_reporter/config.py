"""Loading of the reporter configuration from defaults, file and overrides."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from applause_reporter.auto_api.config import DEFAULT_AUTO_API_URL, AutoApiConfig
from applause_reporter.public_api.config import DEFAULT_PUBLIC_API_URL, PublicApiConfig

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "applause.json"

DEFAULT_PROPERTIES: Mapping[str, Any] = {
    "autoApiBaseUrl": DEFAULT_AUTO_API_URL,
    "publicApiBaseUrl": DEFAULT_PUBLIC_API_URL,
}

REQUIRED_PROPERTIES = ("autoApiBaseUrl", "publicApiBaseUrl", "apiKey", "productId")


class ConfigError(ValueError):
    """Raised when the merged configuration is missing required properties."""


class ApplauseConfig(AutoApiConfig, PublicApiConfig):
    """Configuration shared by the Auto-API and Public-API clients."""


def load_config(
    config_file: str | Path | None = None,
    properties: Mapping[str, Any] | None = None,
) -> ApplauseConfig:
    """Load the configuration.

    Defaults are overridden by the JSON config file, which is overridden by
    ``properties``. Keys use the camelCase names of ``applause.json``.

    Args:
        config_file: Config file path relative to the current directory
            (default: ``applause.json``)
        properties: Explicit overrides, None values are ignored

    Returns:
        The validated configuration

    Raises:
        ConfigError: If a required property is missing after merging
        pydantic.ValidationError: If a property is invalid

    """
    config = dict(DEFAULT_PROPERTIES)
    file_path = Path.cwd() / (config_file or CONFIG_FILE_NAME)
    config = override_config(config, load_config_from_file(file_path))
    config = override_config(config, properties)

    if not is_complete(config):
        missing = [key for key in REQUIRED_PROPERTIES if config.get(key) is None]
        log.error("Applause config is missing properties: %s", ", ".join(missing))
        raise ConfigError("Config is not complete")

    return ApplauseConfig.model_validate(config)


def override_config(
    config: Mapping[str, Any], overrides: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Return a copy of ``config`` updated with the non-None ``overrides``."""
    return {
        **config,
        **{key: value for key, value in (overrides or {}).items() if value is not None},
    }


def is_complete(config: Mapping[str, Any]) -> bool:
    """Check that every required property is set."""
    return all(config.get(key) is not None for key in REQUIRED_PROPERTIES)


def load_config_from_file(config_file: Path) -> dict[str, Any]:
    """Read config properties from a JSON file, empty if it does not exist."""
    if not config_file.exists():
        log.debug("No config file found at %s", config_file)
        return {}
    properties: dict[str, Any] = json.loads(config_file.read_text(encoding="utf-8"))
    return properties
