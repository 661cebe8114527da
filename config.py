import logging
import os
from typing import Dict, Optional

from dotenv import load_dotenv

from errors import ConfigurationError
from validators import InputValidator

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_TYPE = "starter"
DEFAULT_TIMEOUT = 30.0


def load_config(env_file: Optional[str] = None) -> Dict:
    """
    Load client configuration from the environment

    Values from a .env file are loaded first without overriding variables
    that are already set.

    Args:
        env_file: Path to a .env file, defaults to python-dotenv's lookup

    Returns:
        Configuration dictionary with api_key, account_type and timeout

    Raises:
        ConfigurationError: If the configuration is incomplete or invalid
    """
    load_dotenv(env_file)

    raw_timeout = os.getenv("RAJAONGKIR_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigurationError(f"RAJAONGKIR_TIMEOUT must be a number, got {raw_timeout!r}") from None

    config = {
        "api_key": os.getenv("RAJAONGKIR_API_KEY", ""),
        "account_type": os.getenv("RAJAONGKIR_ACCOUNT_TYPE", DEFAULT_ACCOUNT_TYPE),
        "timeout": timeout,
    }

    _validate_config(config)
    logger.info(f"Configuration loaded for '{config['account_type'].lower()}' account")
    return config


def _validate_config(config: Dict) -> None:
    """
    Validate configuration structure

    Raises:
        ConfigurationError: On the first invalid value
    """
    required_keys = ["api_key", "account_type", "timeout"]

    missing = [key for key in required_keys if key not in config]
    if missing:
        raise ConfigurationError(f"Missing required config keys: {missing}")

    key_valid, _, key_error = InputValidator.validate_api_key(config["api_key"])
    if not key_valid:
        raise ConfigurationError(f"RAJAONGKIR_API_KEY: {key_error}")

    tier_valid, _, tier_error = InputValidator.validate_account_type(config["account_type"])
    if not tier_valid:
        raise ConfigurationError(f"RAJAONGKIR_ACCOUNT_TYPE: {tier_error}")

    if config["timeout"] <= 0:
        raise ConfigurationError(f"Timeout must be positive, got {config['timeout']}")

    logger.debug("Configuration validation passed")
