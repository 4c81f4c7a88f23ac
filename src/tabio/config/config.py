"""Configuration management for tabio."""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tabio.core.exceptions import ConfigError
from tabio.models.config import CONFIG_FILE_NAME, TabioConfig, get_home_dir


class _ExplicitFileConfig(TabioConfig):
    """Settings for an explicit config file: the home YAML file is not read."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings)


class ConfigManager:
    """Manages tabio configuration with YAML and environment variable support."""

    CONFIG_FILE_NAME = CONFIG_FILE_NAME
    ENV_PREFIX = "TABIO_"

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        If not provided, uses ~/.tabio/tabio.yaml
        """
        self.base_path = get_home_dir()
        self.config_path = config_path or self.base_path / self.CONFIG_FILE_NAME
        self._config: Optional[TabioConfig] = None

    @property
    def config(self) -> TabioConfig:
        """Get the loaded configuration."""
        return self.load()

    def load(self) -> TabioConfig:
        """Load configuration from YAML file and environment variables.

        Configuration precedence:
        1. Default values (from Pydantic models)
        2. YAML file values
        3. Environment variables (highest priority)

        Returns:
            TabioConfig: Loaded configuration

        Raises:
            ConfigError: If configuration is invalid
        """
        if self._config is not None:
            return self._config

        try:
            if self.config_path == self.base_path / self.CONFIG_FILE_NAME:
                self._config = TabioConfig()
            else:
                # Explicit file: its values sit below the environment
                self._config = self._load_with_file()
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to load configuration from {self.config_path}: {e}") from e

        return self._config

    def save(self, config: TabioConfig, path: Optional[Path] = None) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
            path: Optional path to save to (defaults to config_path)

        Raises:
            ConfigError: If save fails
        """
        save_path = path or self.config_path

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)

            config_dict = config.model_dump(mode="json", exclude_defaults=True)

            with save_path.open("w") as f:
                yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {save_path}: {e}") from e

    def _load_with_file(self) -> TabioConfig:
        file_values = self._load_yaml() if self.config_path.exists() else {}
        env_values = _ExplicitFileConfig().model_dump(exclude_unset=True)
        return _ExplicitFileConfig(**_deep_merge(file_values, env_values))

    def _load_yaml(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with self.config_path.open() as f:
            return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> TabioConfig:
    """Get tabio configuration instance.

    Returns:
        TabioConfig instance
    """
    return get_config_manager().config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global _config_manager
    _config_manager = None
