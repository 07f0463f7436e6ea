"""Settings loading utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..constants import SERVER_URL_ENV
from ..errors.internal import ConfigError
from .model import ClientSettings

CONFIG_FILE_ENV = "COURSE_CLIENT_CONF_FILE"


def _read_config_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read a JSON settings file.

    Args:
        path: Path to the settings file.

    Returns:
        The decoded mapping, or an empty dict when the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logging.debug(f"📁 No settings file at {path}, using defaults")
        return {}
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    return data


def load_settings(
    path: str | os.PathLike[str] | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> ClientSettings:
    """Load client settings from file, environment and explicit overrides.

    Precedence (highest first): ``overrides``, the ``COURSE_API_URL``
    environment variable, the JSON file, model defaults.

    Args:
        path: Settings file; defaults to ``$COURSE_CLIENT_CONF_FILE`` when set.
        overrides: Explicit values, typically from the command line.

    Returns:
        Validated ClientSettings.

    Raises:
        ConfigError: If the merged settings fail validation.
    """
    raw: dict[str, Any] = {}
    file_path = path or os.environ.get(CONFIG_FILE_ENV)
    if file_path:
        raw.update(_read_config_file(Path(file_path)))
    env_url = os.environ.get(SERVER_URL_ENV)
    if env_url:
        raw["server_url"] = env_url
    if overrides:
        raw.update({k: v for k, v in overrides.items() if v is not None})
    try:
        settings = ClientSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid client settings: {e}") from e
    logging.debug(f"⚙️ Loaded client settings server={settings.server_url}")
    return settings
