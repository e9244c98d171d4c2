"""
Configuration management for notionrecords.

This module handles loading and accessing configuration values from config.yaml.
Environment variables override the file for the values a deployment usually
injects (the session token, the API base URL and the cache lifetime).
"""

import yaml
import os
from pathlib import Path
from typing import Any, Dict, Optional
import logging


# Environment variable -> dotted configuration key
ENVIRONMENT_OVERRIDES = {
    "NOTION_TOKEN": "api.token",
    "API_BASE_URL": "api.base_url",
    "CACHE_LIFETIME": "cache.lifetime_seconds",
}

CACHE_DISABLED = -1


class ConfigManager:
    """
    Manages configuration loading and access for notionrecords.
    """

    def __init__(self, config_path: str = "config.yaml", environ: Optional[Dict[str, str]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
            environ: Environment mapping to read overrides from (defaults to os.environ)
        """
        self.config_path = Path(config_path)
        self._environ = os.environ if environ is None else environ
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file, then apply environment overrides."""
        self._config = self._get_default_config()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            self._merge(self._config, loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except FileNotFoundError:
            logging.debug(f"No configuration file at {self.config_path}, using defaults")
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")

        for variable, key_path in ENVIRONMENT_OVERRIDES.items():
            value = self._environ.get(variable)
            if value:
                self.set(key_path, value)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "api": {
                "token": None,
                "base_url": "https://www.notion.so/api/v3/",
                "timeout": 30.0,
                "page_chunk_limit": 50,
                "search_limit": 10000
            },
            "cache": {
                "lifetime_seconds": 0,
                "database": "notion_cache.db"
            },
            "paths": {
                "log_file": None
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    @classmethod
    def _merge(cls, target: Dict[str, Any], source: Dict[str, Any]) -> None:
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                cls._merge(target[key], value)
            else:
                target[key] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "api.base_url")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("api.timeout")  # Returns 30.0
            config.get("cache.lifetime_seconds")  # Returns 0
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set a configuration value using dot notation, creating sections as needed."""
        keys = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            section = section.setdefault(key, {})
        section[keys[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def token(self) -> Optional[str]:
        """Get the session token."""
        return self.get("api.token")

    @property
    def api_base_url(self) -> str:
        """Get the API base URL."""
        return self.get("api.base_url", "https://www.notion.so/api/v3/")

    @property
    def api_timeout(self) -> float:
        """Get the transport timeout."""
        return float(self.get("api.timeout", 30.0))

    @property
    def page_chunk_limit(self) -> int:
        return int(self.get("api.page_chunk_limit", 50))

    @property
    def search_limit(self) -> int:
        return int(self.get("api.search_limit", 10000))

    @property
    def cache_lifetime(self) -> int:
        """Get the response cache lifetime in seconds (-1 disables caching)."""
        return int(self.get("cache.lifetime_seconds", 0))

    @property
    def cache_database(self) -> str:
        """Get the cache database path."""
        return self.get("cache.database", "notion_cache.db")

    @property
    def log_filename(self) -> Optional[str]:
        """Get log file name."""
        return self.get("paths.log_file")


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
