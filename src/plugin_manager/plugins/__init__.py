"""
Plugin Manager Plugin System.

Plugin classes declare typed constructor arguments; the PluginManager
registers them, exposes their arguments as command line options and
initializes them from merged configuration.
"""

from plugin_manager.plugins.arguments import (
    INITIALIZE,
    PARAMETER,
    UNSET,
    Argument,
    ArgumentType,
    PluginSettings,
    PluginType,
    command_line_parameter,
    plugin_argument,
)
from plugin_manager.plugins.base import Plugin
from plugin_manager.plugins.manager import (
    PluginManager,
    get_plugin_manager,
    set_plugin_manager,
)
from plugin_manager.plugins.options import bind_options
from plugin_manager.plugins.resolution import (
    ArgumentResolution,
    OptionsShape,
    classify_options,
    is_argument_valid,
    resolve_argument,
    resolve_arguments,
)

__all__ = [
    "INITIALIZE",
    "PARAMETER",
    "UNSET",
    "Argument",
    "ArgumentType",
    "PluginSettings",
    "PluginType",
    "command_line_parameter",
    "plugin_argument",
    "Plugin",
    "PluginManager",
    "get_plugin_manager",
    "set_plugin_manager",
    "bind_options",
    "ArgumentResolution",
    "OptionsShape",
    "classify_options",
    "is_argument_valid",
    "resolve_argument",
    "resolve_arguments",
]
