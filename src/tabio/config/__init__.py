"""Configuration module - provides access to tabio configuration."""

from tabio.config.config import ConfigManager, get_config, get_config_manager, reset_config
from tabio.models.config import TabioConfig

__all__ = ["ConfigManager", "TabioConfig", "get_config", "get_config_manager", "reset_config"]
