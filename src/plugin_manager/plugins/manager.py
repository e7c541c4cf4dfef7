"""
Plugin Manager registry.

Keeps track of every declared plugin type, the groups they joined and
the instances created by bulk initialization.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from plugin_manager.core.errors import GroupNotFoundError, PluginNotFoundError
from plugin_manager.core.logging import OperationLogger, get_logger
from plugin_manager.plugins.arguments import PluginType
from plugin_manager.plugins.options import ParsedOptions, bind_options

if TYPE_CHECKING:
    from plugin_manager.core.config import PluginManagerConfig
    from plugin_manager.plugins.base import Plugin

logger = get_logger(__name__)


class PluginManager:
    """
    Registry of plugin types.

    Plugin classes register themselves when they are declared. The manager
    is not thread safe; declaration, flag binding and initialization have to
    be serialized by the application.
    """

    def __init__(
        self,
        scope: str | None = None,
        config: PluginManagerConfig | None = None,
    ) -> None:
        self.config = config
        self.scope = scope if scope is not None else (config.scope if config else None)
        self._plugins: dict[str, PluginType] = {}
        self._groups: dict[str, dict[str, PluginType]] = {}
        self._instances: dict[str, Plugin] = {}
        self._loaded_paths: set[Path] = set()

    def register(self, plugin_type: PluginType) -> None:
        """Add a plugin type; a type registered twice under one name is replaced."""
        previous = self._plugins.get(plugin_type.name)
        if previous is not None and previous is not plugin_type:
            logger.debug("Replacing plugin type", plugin=plugin_type.name)
        self._plugins[plugin_type.name] = plugin_type
        logger.debug("Registered plugin type", plugin=plugin_type.name)

    def add_to_group(self, plugin_type: PluginType, group: str) -> None:
        """Add a plugin type to a group, creating the group on first use."""
        self._groups.setdefault(str(group), {})[plugin_type.name] = plugin_type
        plugin_type.add_group(str(group))
        logger.debug("Added plugin to group", plugin=plugin_type.name, group=group)

    def scoped_name(self, name: str) -> str:
        """Prefix a name with the configured scope."""
        if self.scope:
            return f"{self.scope}.{name}"
        return name

    def unscoped_name(self, name: str) -> str:
        """Strip the configured scope from a registered name."""
        if self.scope and name.startswith(self.scope + "."):
            return name[len(self.scope) + 1 :]
        return name

    def plugin_type(self, name: str) -> PluginType | None:
        """Get the descriptor of a plugin, name given without scope."""
        return self._plugins.get(self.scoped_name(name))

    def get(self, name: str) -> type[Plugin] | None:
        """Get a plugin class, name given without scope."""
        plugin_type = self.plugin_type(name)
        if plugin_type is None:
            return None
        return plugin_type.plugin_class

    def __getitem__(self, name: str) -> type[Plugin]:
        plugin_class = self.get(name)
        if plugin_class is None:
            raise PluginNotFoundError(self.scoped_name(name))
        return plugin_class

    def instance(self, name: str) -> Plugin | None:
        """Get the instance created by initialize_plugins, name given without scope."""
        return self._instances.get(self.scoped_name(name))

    def plugin_types(self) -> list[PluginType]:
        """All registered plugin types, in registration order."""
        return list(self._plugins.values())

    def groups(self) -> list[str]:
        """Names of all groups with at least one member."""
        return list(self._groups.keys())

    def each(self, group: str | None = None) -> Iterator[tuple[type[Plugin], Plugin | None]]:
        """
        Iterate over enabled plugins and their instances.

        Yields:
            (plugin class, instance or None) pairs

        Raises:
            GroupNotFoundError: If the group has no members
        """
        if group is None:
            members = self._plugins
        elif str(group) in self._groups:
            members = self._groups[str(group)]
        else:
            raise GroupNotFoundError(str(group))

        return self._iter_members(dict(members))

    def _iter_members(
        self, members: dict[str, PluginType]
    ) -> Iterator[tuple[type[Plugin], Plugin | None]]:
        for name, plugin_type in members.items():
            if plugin_type.disabled:
                continue
            yield plugin_type.plugin_class, self._instances.get(name)

    def initialize_plugins(
        self,
        options: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> dict[str, Plugin]:
        """
        Create one instance per plugin that can be constructed.

        Plugins marked disabled or skip_auto_initialization are left out.
        A plugin whose construction fails is logged and skipped.

        Args:
            options: Per-plugin options keyed by plugin name
            defaults: Options applied to every plugin, overridden per plugin

        Returns:
            The instances created in this pass, keyed by plugin name
        """
        options = options or {}
        defaults = dict(defaults or {})
        created: dict[str, Plugin] = {}

        with OperationLogger("plugin initialization", logger, plugins=len(self._plugins)) as op:
            for name, plugin_type in list(self._plugins.items()):
                if plugin_type.plugin_class is None:
                    continue
                if plugin_type.skip_auto_initialization or plugin_type.disabled:
                    logger.debug("Skipping plugin initialization", plugin=name)
                    continue

                plugin_options = options.get(name)
                if isinstance(plugin_options, Mapping):
                    arguments = {**defaults, **plugin_options}
                else:
                    arguments = dict(defaults)

                try:
                    instance = plugin_type.plugin_class(arguments)
                except (TypeError, ValueError) as e:
                    logger.debug("Plugin not initialized", plugin=name, error=str(e))
                    continue

                self._instances[name] = instance
                created[name] = instance

            op.update(initialized=len(created))

        return created

    def reset_instances(self) -> None:
        """Drop every instance created by initialize_plugins."""
        self._instances.clear()

    def extend_command(
        self,
        command: click.Command,
        argument_groups: Iterable[str] | None = None,
    ) -> ParsedOptions:
        """Add the plugin arguments as options to a click command."""
        return bind_options(self, command, argument_groups)

    def load_modules(self, modules: Iterable[str]) -> int:
        """
        Import plugin modules by dotted name.

        Plugins register themselves on import. Returns the number of
        modules imported successfully.
        """
        loaded = 0
        for module in modules:
            try:
                importlib.import_module(module)
                loaded += 1
            except Exception as e:
                logger.error("Failed to load plugin module", module=module, error=str(e))
        return loaded

    def load_from_path(self, path: Path) -> int:
        """
        Load plugin modules from a directory path.

        Returns number of modules loaded.
        """
        if not path.exists() or not path.is_dir():
            logger.warning("Plugin path not found", path=str(path))
            return 0

        if path in self._loaded_paths:
            return 0

        self._loaded_paths.add(path)
        loaded = 0

        for plugin_file in sorted(path.glob("*.py")):
            if plugin_file.name.startswith("_"):
                continue

            module_name = f"plugin_manager_plugin_{plugin_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, plugin_file)
                if spec is None or spec.loader is None:
                    continue

                module = importlib.util.module_from_spec(spec)
                sys.modules[spec.name] = module
                spec.loader.exec_module(module)
                loaded += 1
            except Exception as e:
                sys.modules.pop(module_name, None)
                logger.error(
                    "Failed to load plugin file",
                    path=str(plugin_file),
                    error=str(e),
                )

        return loaded

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.scoped_name(name) in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._plugins))

    def __repr__(self) -> str:
        return f"PluginManager(scope={self.scope!r}, plugins={list(self._plugins)!r})"


_default_manager: PluginManager | None = None


def get_plugin_manager() -> PluginManager:
    """Get the process-wide plugin manager, creating it on first use."""
    global _default_manager

    if _default_manager is None:
        _default_manager = PluginManager()
    return _default_manager


def set_plugin_manager(manager: PluginManager | None) -> PluginManager | None:
    """Replace the process-wide plugin manager, returning the previous one."""
    global _default_manager

    previous = _default_manager
    _default_manager = manager
    return previous
