"""
Plugin Manager exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable


class PluginManagerError(Exception):
    """Base class for all plugin manager errors."""


class MissingArgumentsError(PluginManagerError, TypeError):
    """
    Raised when required plugin arguments could not be resolved.

    All offending arguments are collected into a single error, in
    declaration order.
    """

    def __init__(self, arguments: Iterable[str] = ()) -> None:
        self.arguments: list[str] = []
        self.extend(arguments)
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return "missing keywords: " + ", ".join(self.arguments)

    def extend(self, arguments: Iterable[str]) -> None:
        """Add further missing argument names, skipping duplicates."""
        for argument in arguments:
            if argument not in self.arguments:
                self.arguments.append(argument)
        self.args = (self.message,)

    def __str__(self) -> str:
        return self.message


class GroupNotFoundError(PluginManagerError, LookupError):
    """Raised when iterating over a plugin group nobody joined."""

    def __init__(self, group: str) -> None:
        self.group = group
        super().__init__(f"plugin group not found: {group}")


class PluginNotFoundError(PluginManagerError, KeyError):
    """Raised when a plugin name is not registered."""

    def __init__(self, plugin_name: str) -> None:
        self.plugin_name = plugin_name
        super().__init__(plugin_name)

    def __str__(self) -> str:
        return f"plugin not found: {self.plugin_name}"
