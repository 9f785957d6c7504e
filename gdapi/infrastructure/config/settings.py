"""Provides functions for loading client configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (e.g., ~/.gdapi/config.yaml).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from gdapi.domain.models.errors import ConfigurationError
from gdapi.infrastructure.resilience.rate_limiter import DEFAULT_BURST, DEFAULT_REFILL_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".gdapi"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

PRODUCTION_ENDPOINT = "https://api.godaddy.com"
OTE_ENDPOINT = "https://api.ote-godaddy.com"
DEFAULT_TIMEOUT_SECONDS = 180.0

# Config key -> environment variable
ENV_VARS: Dict[str, str] = {
    "godaddy.api_key": "GODADDY_API_KEY",
    "godaddy.api_secret": "GODADDY_API_SECRET",
    "godaddy.endpoint": "GODADDY_ENDPOINT",
    "godaddy.use_ote": "GODADDY_USE_OTE",
    "godaddy.timeout": "GODADDY_TIMEOUT",
    "godaddy.rate_interval": "GODADDY_RATE_INTERVAL",
    "godaddy.burst": "GODADDY_BURST",
    "logging.level": "GDAPI_LOG_LEVEL",
    "logging.file": "GDAPI_LOG_FILE",
}


@dataclass(frozen=True)
class ClientSettings:
    """Immutable configuration for one GoDaddyClient."""
    api_key: str
    api_secret: str
    endpoint: str = PRODUCTION_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    rate_interval: float = DEFAULT_REFILL_INTERVAL_SECONDS
    burst: int = DEFAULT_BURST
    use_ote: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __repr__(self) -> str:
        # Keep the secret out of logs and tracebacks
        return (
            f"ClientSettings(api_key={self.api_key!r}, api_secret='***', endpoint={self.endpoint!r}, "
            f"timeout={self.timeout}, rate_interval={self.rate_interval}, burst={self.burst})"
        )


def coerce_value(value: str) -> Any:
    """Converts an environment string into bool, int or float where it looks like one."""
    if value.lower() == 'true':
        return True
    elif value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        else:
            return int(value)
    except (ValueError, TypeError):
        return value


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """Reads a YAML config file and flattens it into dotted keys.

    A missing file yields an empty mapping.

    Raises:
        ConfigurationError: If the file exists but is not a YAML mapping.
    """
    if not config_file.exists():
        logger.debug(f"YAML config file not found: {config_file}")
        return {}
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML config {config_file}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"YAML config file {config_file} did not contain a mapping.")
    logger.info(f"Loaded configuration from YAML: {config_file}")
    return _flatten(raw)


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def get_config(key: str, file_config: Dict[str, Any], default: Any = None, coerce: bool = True) -> Any:
    """Gets a configuration value by dotted key.

    Priority:
    1. Environment variable (including values loaded from .env)
    2. YAML config
    3. Default value
    """
    env_key = ENV_VARS.get(key, key.upper().replace('.', '_'))
    if env_key in os.environ:
        value = os.environ[env_key]
        return coerce_value(value) if coerce else value
    if key in file_config:
        return file_config[key]
    return default


def load_settings(
    config_file: Optional[Path] = None,
    env_file: Optional[Path] = None,
    use_ote: Optional[bool] = None,
) -> ClientSettings:
    """Loads client settings from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file (never overrides variables already set)
    3. YAML configuration file
    4. Defaults

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        use_ote: Forces the OTE test environment on or off.

    Raises:
        ConfigurationError: If credentials are missing or a value is invalid.
    """
    file_config = load_yaml_config(config_file or DEFAULT_CONFIG_FILE)

    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path, override=False):
        logger.info(f"Loaded environment variables from: {dotenv_path}")

    api_key = get_config("godaddy.api_key", file_config, coerce=False)
    api_secret = get_config("godaddy.api_secret", file_config, coerce=False)
    if not api_key or not api_secret:
        raise ConfigurationError(
            "GoDaddy API key and secret are required (GODADDY_API_KEY / GODADDY_API_SECRET)."
        )

    ote = bool(get_config("godaddy.use_ote", file_config, False)) if use_ote is None else use_ote
    endpoint = get_config("godaddy.endpoint", file_config, coerce=False) or (OTE_ENDPOINT if ote else PRODUCTION_ENDPOINT)

    try:
        timeout = float(get_config("godaddy.timeout", file_config, DEFAULT_TIMEOUT_SECONDS))
        rate_interval = float(get_config("godaddy.rate_interval", file_config, DEFAULT_REFILL_INTERVAL_SECONDS))
        burst = int(get_config("godaddy.burst", file_config, DEFAULT_BURST))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    log_file = get_config("logging.file", file_config)
    settings = ClientSettings(
        api_key=str(api_key),
        api_secret=str(api_secret),
        endpoint=str(endpoint).rstrip('/'),
        timeout=timeout,
        rate_interval=rate_interval,
        burst=burst,
        use_ote=ote,
        log_level=str(get_config("logging.level", file_config, "INFO")).upper(),
        log_file=str(log_file) if log_file else None,
    )
    logger.debug(f"Settings loaded: {settings!r}")
    return settings
