"""
Plugin Manager plugin base class.

Subclasses of Plugin declare their arguments, groups and settings; the
declarations are recorded on a PluginType that is registered with a
PluginManager as soon as the class is created.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from plugin_manager import __version__
from plugin_manager.core.logging import get_logger
from plugin_manager.plugins.arguments import (
    INITIALIZE,
    PARAMETER,
    Argument,
    PluginType,
    command_line_parameter,
    plugin_argument,
)
from plugin_manager.plugins.manager import PluginManager, get_plugin_manager
from plugin_manager.plugins.resolution import ArgumentResolution, resolve_arguments

logger = get_logger(__name__)


class Plugin:
    """
    Base class for all plugins.

    Arguments are declared as class attributes:

        class Mailer(Plugin, groups=["notifiers"]):
            host = plugin_argument(description="SMTP host")
            port = plugin_argument(optional=True, default="25")
            verbose = command_line_parameter(type=bool, simple=True)

    Class keywords:
        manager: PluginManager to register with; inherited from the parent
        name: Registry name, defaults to the class name
        groups: Plugin groups to join
        settings: Plugin settings, e.g. {"disabled": True}
        opt_token: Flag prefix used instead of the name
    """

    VERSION: ClassVar[str] = __version__

    #: Flag prefix used instead of the plugin name
    OPT_TOKEN: ClassVar[str | None] = None

    plugin_type: ClassVar[PluginType] = PluginType(name="Plugin")
    plugin_manager: ClassVar[PluginManager | None] = None

    def __init_subclass__(
        cls,
        manager: PluginManager | None = None,
        name: str | None = None,
        groups: Iterable[str] = (),
        settings: dict[str, Any] | None = None,
        opt_token: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)

        if manager is None:
            manager = cls.plugin_manager
        if manager is None:
            manager = get_plugin_manager()

        # Not yet set on cls itself, so this is the nearest ancestor's descriptor.
        plugin_type = cls.plugin_type.derive(
            name or cls.__name__,
            plugin_class=cls,
            opt_token=opt_token or cls.OPT_TOKEN,
        )
        cls.plugin_type = plugin_type
        cls.plugin_manager = manager
        manager.register(plugin_type)

        for attribute, value in list(cls.__dict__.items()):
            if isinstance(value, Argument):
                plugin_type.add_argument(value)
                setattr(cls, attribute, None)

        if settings:
            plugin_type.settings.update(settings)
        for group in groups:
            manager.add_to_group(plugin_type, group)

    def __init__(self, options: Any = None) -> None:
        resolve_arguments(type(self).plugin_type, options, on_argument=self.initialize_argument)
        self.after_initialize()

    def initialize_argument(self, resolution: ArgumentResolution) -> None:
        """
        Apply the resolution of one argument.

        Sets the instance attribute of constructor arguments. Override to
        consume arguments of other groups; raise MissingArgumentsError to
        fail construction for an argument.
        """
        if resolution.group == INITIALIZE and not resolution.missing:
            setattr(self, resolution.name, resolution.value)

    def after_initialize(self) -> None:
        """Called once after every argument has been set."""

    @classmethod
    def plugin_argument(cls, argument: str, **kwargs: Any) -> Argument:
        """Declare a constructor argument after the class body."""
        return cls.plugin_type.add_argument(plugin_argument(argument, **kwargs))

    @classmethod
    def add_command_line_parameter(
        cls, argument: str, group: str = PARAMETER, **kwargs: Any
    ) -> Argument:
        """Declare a command line parameter the constructor ignores."""
        return cls.plugin_type.add_argument(command_line_parameter(argument, group=group, **kwargs))

    @classmethod
    def plugin_group(cls, group: str) -> None:
        """Add the plugin to a group."""
        manager = cls.plugin_manager if cls.plugin_manager is not None else get_plugin_manager()
        manager.add_to_group(cls.plugin_type, group)

    @classmethod
    def plugin_groups(cls) -> list[str]:
        return list(cls.plugin_type.groups)

    @classmethod
    def plugin_setting(cls, setting: str, value: Any) -> None:
        """Set a plugin setting respected by the PluginManager."""
        cls.plugin_type.set_setting(setting, value)

    @classmethod
    def plugin_settings(cls, setting: str) -> Any:
        """Get a plugin setting, None when it was never set."""
        return cls.plugin_type.setting(setting)

    @classmethod
    def arguments(cls, groups: Iterable[str] | None = None) -> list[Argument]:
        return cls.plugin_type.get_arguments(groups)

    @classmethod
    def arguments_required(cls) -> bool:
        """Whether any constructor argument is required."""
        return cls.plugin_type.arguments_required()
