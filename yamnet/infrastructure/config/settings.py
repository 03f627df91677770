"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.yamnet/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from yamnet.domain.models.common import (
    AccessToken, DEFAULT_BASE_DELAY_S, DEFAULT_ENDPOINT, DEFAULT_FIRST_UNAUTHORIZED_RETRY_DELAY_S,
    DEFAULT_MAX_ATTEMPTS, Endpoint, RetryPolicy,
)
from yamnet.domain.models.errors import ConfigurationError
from yamnet.infrastructure.http.transport import DEFAULT_TIMEOUT_S

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".yamnet"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML sections into dotted keys ('retry.max_attempts')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None,
                       force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    # 3. Environment Variables (Highest priority) are handled by os.environ in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def get_config(key: str, default: Any = None, coerce: bool = True) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (key upper-cased, dots become underscores,
       e.g. 'retry.max_attempts' -> RETRY_MAX_ATTEMPTS)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key
        default: Default value if the key is not found
        coerce: Convert environment strings to bool/int/float

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace(".", "_")
    if env_key in os.environ:
        value = os.environ[env_key]
        return _coerce(value) if coerce else value

    if key in _config:
        return _config[key]

    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_access_token() -> AccessToken:
    """The Yammer OAuth token (YAMMER_ACCESS_TOKEN or yammer.access_token).

    Raises:
        ConfigurationError: If no token is configured.
    """
    # Tokens are opaque: "0123" or "true" must reach the header unchanged.
    token = get_config("YAMMER_ACCESS_TOKEN", coerce=False) or get_config("yammer.access_token", coerce=False)
    if not token:
        raise ConfigurationError(
            "No access token configured. Set YAMMER_ACCESS_TOKEN or yammer.access_token in "
            f"{DEFAULT_CONFIG_FILE}."
        )
    return AccessToken(str(token))


def get_endpoint() -> Endpoint:
    return Endpoint(str(get_config("yammer.endpoint", DEFAULT_ENDPOINT)))


def get_timeout() -> float:
    return float(get_config("yammer.timeout", DEFAULT_TIMEOUT_S))


def get_proxy() -> Optional[str]:
    proxy = get_config("yammer.proxy")
    return str(proxy) if proxy else None


def get_retry_policy() -> RetryPolicy:
    """Builds the RetryPolicy from 'retry.*' keys.

    Raises:
        ConfigurationError: If a value is not a number or out of range.
    """
    try:
        return RetryPolicy(
            max_attempts=int(get_config("retry.max_attempts", DEFAULT_MAX_ATTEMPTS)),
            base_delay=float(get_config("retry.base_delay", DEFAULT_BASE_DELAY_S)),
            first_unauthorized_retry_delay=float(
                get_config("retry.first_unauthorized_retry_delay", DEFAULT_FIRST_UNAUTHORIZED_RETRY_DELAY_S)
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid retry configuration: {e}") from e


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value for the current process."""
    logger.debug(f"Setting config: {key}")
    _config[key] = value


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration keys: {list(config_dict)}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
