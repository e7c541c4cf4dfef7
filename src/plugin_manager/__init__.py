"""
Plugin Manager - Plugin registration and argument binding.

Plugin classes declare named, typed constructor arguments; the plugin
manager groups them, turns their arguments into command line options and
initializes them from defaults, parsed options and explicit mappings.
"""

__version__ = "0.3.0"
__author__ = "Plugin Manager Developers"

from plugin_manager.core.config import PluginManagerConfig
from plugin_manager.core.errors import (
    GroupNotFoundError,
    MissingArgumentsError,
    PluginNotFoundError,
)
from plugin_manager.plugins import (
    Plugin,
    PluginManager,
    command_line_parameter,
    get_plugin_manager,
    plugin_argument,
)

__all__ = [
    "GroupNotFoundError",
    "MissingArgumentsError",
    "Plugin",
    "PluginManager",
    "PluginManagerConfig",
    "PluginNotFoundError",
    "command_line_parameter",
    "get_plugin_manager",
    "plugin_argument",
    "__version__",
]
