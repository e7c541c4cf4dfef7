"""
Plugin Manager Core - Ambient services.

Contains configuration, structured logging and the exception
hierarchy shared by the plugin subsystem and the CLI.
"""

from plugin_manager.core.config import LoggingConfig, PluginManagerConfig, load_config
from plugin_manager.core.errors import (
    GroupNotFoundError,
    MissingArgumentsError,
    PluginManagerError,
    PluginNotFoundError,
)
from plugin_manager.core.logging import get_logger, setup_logging

__all__ = [
    "LoggingConfig",
    "PluginManagerConfig",
    "load_config",
    "GroupNotFoundError",
    "MissingArgumentsError",
    "PluginManagerError",
    "PluginNotFoundError",
    "get_logger",
    "setup_logging",
]
