"""
Configuration Utility Module

This module provides functions for loading and accessing application configuration.
"""

import os
import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List

# Default configuration file path
CONFIG_FILE_PATH = os.getenv("CONFIG_FILE_PATH", "config.yaml")

DEFAULT_SCOPES = (
    "https://www.googleapis.com/auth/contacts,"
    "https://www.googleapis.com/auth/gmail.send,"
    "https://www.googleapis.com/auth/gmail.readonly"
)

# Cached configuration
_config_cache: Optional[Dict[str, Any]] = None


def load_yaml_config() -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Returns:
        Dict[str, Any]: Configuration dictionary from YAML file or empty dict if file not found.
    """
    try:
        config_path = Path(CONFIG_FILE_PATH)
        if config_path.exists():
            with open(config_path, "r") as f:
                return yaml.safe_load(f) or {}
        else:
            logging.warning(f"Configuration file not found: {CONFIG_FILE_PATH}")
            return {}
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Error loading configuration file: {e}")
        return {}


def safe_split(value: Optional[str], delimiter: str = ",") -> List[str]:
    """Split a string safely, returning an empty list if the value is None."""
    if value:
        return [part.strip() for part in value.split(delimiter) if part.strip()]
    return []


def get_config() -> Dict[str, Any]:
    """
    Get the application configuration from YAML file and environment variables.
    Environment variables for sensitive data take precedence.

    Configuration is cached after first load.

    Returns:
        Dict[str, Any]: A dictionary containing the application configuration.
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    yaml_config = load_yaml_config()

    logging_config = yaml_config.get("logging", {})
    google_config = yaml_config.get("google", {})
    tokens_config = yaml_config.get("tokens", {})
    cache_config = yaml_config.get("cache", {})
    contacts_config = yaml_config.get("contacts", {})
    reports_config = yaml_config.get("reports", {})

    config = {
        "log_level": logging_config.get("level", "INFO"),

        # Google OAuth configuration (secrets from env vars, rest from YAML)
        "google_client_id": os.getenv("GOOGLE_CLIENT_ID", ""),
        "google_client_secret": os.getenv("GOOGLE_CLIENT_SECRET", ""),
        "google_auth_scopes": safe_split(google_config.get("scopes", DEFAULT_SCOPES)),
        "oauth_port": int(google_config.get("oauth_port", 8000)),

        # Token storage (path from YAML, encryption key from env vars)
        "token_storage_path": tokens_config.get("storage_path", ""),
        "token_encryption_key": os.getenv("TOKEN_ENCRYPTION_KEY", ""),

        # Property store backed cache
        "property_store_path": cache_config.get("path") or os.getenv("PROPERTY_STORE_PATH", ""),
        "cache_default_ttl": int(cache_config.get("default_ttl", 60 * 60)),
        "contacts_cache_ttl": int(cache_config.get("contacts_ttl", 30 * 60)),

        # Contact retrieval
        "page_size": int(contacts_config.get("page_size", 100)),
        "max_retries": int(contacts_config.get("max_retries", 3)),

        # Report dispatch
        "report_recipient": reports_config.get("recipient") or os.getenv("REPORT_RECIPIENT", ""),
        "sender_name": reports_config.get("sender_name", "Contacts Report"),
        "birthday_window_days": int(reports_config.get("birthday_window_days", 7)),
    }

    _config_cache = config
    return config


def get_config_value(key: str, default: Optional[Any] = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        key (str): The configuration key to retrieve.
        default (Optional[Any], optional): The default value if the key is not found. Defaults to None.

    Returns:
        Any: The configuration value.
    """
    config = get_config()
    return config.get(key, default)


def reset_config_cache() -> None:
    """Drop the cached configuration so the next call reloads it."""
    global _config_cache
    _config_cache = None
