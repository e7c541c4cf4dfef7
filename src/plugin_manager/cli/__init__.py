"""
Plugin Manager CLI Module.

Provides command-line interface for inspecting and initializing plugins.
"""

from plugin_manager.cli.main import cli, main

__all__ = ["main", "cli"]
