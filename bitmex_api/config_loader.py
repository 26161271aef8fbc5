"""Config Loader - Loads client configuration from YAML.

Credentials can stay out of the file: any string value may reference an
environment variable as ${NAME}, or ${NAME:-fallback} to use fallback when
NAME is unset.

Example:
    host: https://testnet.bitmex.com/api/v1
    api_key: ${BITMEX_API_KEY}
    api_secret: ${BITMEX_API_SECRET}
    timeout: 10
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bitmex_api.errors import ConfigError
from bitmex_api.models import Configuration

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def load_configuration(config_path: Path | str) -> Configuration:
    """Load a Configuration from a YAML file.

    An empty file yields the default configuration.

    Raises:
        ConfigError: If the file is missing, is not a YAML mapping, references
            an unset environment variable, or fails validation.
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_path} must contain a YAML mapping")

    try:
        return Configuration.model_validate(_expand_env(raw_config))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(_resolve_reference, value)
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    return value


def _resolve_reference(match: re.Match) -> str:
    name = match.group("name")
    value = os.environ.get(name)
    if value is not None:
        return value
    fallback = match.group("fallback")
    if fallback is None:
        raise ConfigError(f"Environment variable '{name}' is not set")
    return fallback
