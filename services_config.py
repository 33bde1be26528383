"""
services_config.py
==================
Configuration loading and logging setup.

Configuration comes from a JSON file (``config.json`` by default; see
``config_template.json``) with environment variables taking precedence::

    {
      "base_url": "https://api.example.com/v1/",
      "log_level": "WARNING",
      "api_timeout_seconds": null
    }

Environment overrides (a ``.env`` file in the working directory is loaded
first):

- ``SERVICES_BASE_URL``    overrides ``base_url``
- ``SERVICES_LOG_LEVEL``   overrides ``log_level``
- ``SERVICES_API_TIMEOUT`` overrides ``api_timeout_seconds``
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = 'config.json'
DEFAULT_LOG_LEVEL = 'WARNING'

_ENV_OVERRIDES = {
    'SERVICES_BASE_URL': 'base_url',
    'SERVICES_LOG_LEVEL': 'log_level',
    'SERVICES_API_TIMEOUT': 'api_timeout_seconds',
}


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Configure the root ``mvvm`` logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger('mvvm')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


def is_placeholder_value(value: Any) -> bool:
    """Check if a value is an unset template placeholder."""
    if not value or not isinstance(value, str):
        return True
    return value.strip().startswith('YOUR_')


def load_config(config_path: str = DEFAULT_CONFIG_PATH, require_file: bool = False) -> Dict[str, Any]:
    """Load configuration from *config_path* and apply environment overrides.

    A missing file yields an empty base configuration unless *require_file*
    is set.  ``base_url`` is not validated here because the CLI may supply it.

    Raises:
        ConfigError: The file is missing (with *require_file*), unreadable,
                     not a JSON object, or holds an invalid timeout.
    """
    load_dotenv()

    config: Dict[str, Any] = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Error parsing config file '{config_path}': {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file '{config_path}': {e}") from e
        if not isinstance(config, dict):
            raise ConfigError(f"Config file '{config_path}' must contain a JSON object")
    elif require_file:
        raise ConfigError(f"Config file '{config_path}' not found")

    for env_name, key in _ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config[key] = os.getenv(env_name)

    config['log_level'] = config.get('log_level') or DEFAULT_LOG_LEVEL
    config['api_timeout_seconds'] = parse_timeout(config.get('api_timeout_seconds'))
    return config


def parse_timeout(value: Any, name: str = 'api_timeout_seconds') -> Optional[float]:
    """Normalise a timeout setting; ``None``/empty means no timeout.

    Raises:
        ConfigError: The value is not a positive number.
    """
    if value is None or value == '':
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if timeout <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return timeout


def resolve_base_url(config: Dict[str, Any], override: Optional[str] = None) -> str:
    """Return the base URL from *override* or *config*.

    Raises:
        ConfigError: No usable base URL is configured.
    """
    base_url = override or config.get('base_url', '')
    if is_placeholder_value(base_url):
        raise ConfigError(
            "Please configure base_url in config.json, set SERVICES_BASE_URL, "
            "or pass --base-url"
        )
    return base_url.strip()
