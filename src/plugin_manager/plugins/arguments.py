"""
Plugin argument and plugin type descriptors.

An Argument describes one named constructor parameter of a plugin; a
PluginType collects the arguments, group memberships and settings of one
plugin class and is shared between the class and the plugin manager.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

INITIALIZE = "initialize"
PARAMETER = "parameter"


class _Unset:
    """Marker for an argument value that was never parsed."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Unset:
        return self


UNSET: Any = _Unset()


class ArgumentType(Enum):
    """Shape of the command line flag generated for an argument."""

    BOOLEAN = auto()
    LIST = auto()
    STRING = auto()
    UNSPECIFIED = auto()

    @classmethod
    def from_hint(cls, hint: Any) -> ArgumentType:
        """Create an ArgumentType from an enum member, a Python type or its name."""
        if hint is None:
            return cls.UNSPECIFIED
        if isinstance(hint, cls):
            return hint
        if isinstance(hint, type):
            if issubclass(hint, bool):
                return cls.BOOLEAN
            if issubclass(hint, (list, tuple)):
                return cls.LIST
            if issubclass(hint, str):
                return cls.STRING
            return cls.UNSPECIFIED

        value = str(hint).lower().strip()
        aliases = {
            "bool": cls.BOOLEAN,
            "boolean": cls.BOOLEAN,
            "list": cls.LIST,
            "array": cls.LIST,
            "str": cls.STRING,
            "string": cls.STRING,
        }
        return aliases.get(value, cls.UNSPECIFIED)


@dataclass(eq=False)
class Argument:
    """Metadata of one declared plugin argument."""

    name: str | None = None
    group: str = INITIALIZE
    default: Any = None
    optional: bool = False
    validator: Callable[[Any], bool] | None = None
    type_hint: ArgumentType = ArgumentType.UNSPECIFIED
    simple: bool = False
    description: str | None = None
    value: Any = field(default=UNSET, repr=False)

    def __post_init__(self) -> None:
        self.type_hint = ArgumentType.from_hint(self.type_hint)

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    @property
    def is_value_set(self) -> bool:
        return self.value is not UNSET

    @property
    def is_boolean(self) -> bool:
        return self.type_hint is ArgumentType.BOOLEAN

    @property
    def is_list(self) -> bool:
        return self.type_hint is ArgumentType.LIST

    def copy(self) -> Argument:
        """Return a value copy of the declaration without the parsed value."""
        return dataclasses.replace(self, value=UNSET)

    def reset(self) -> None:
        """Forget the last parsed value."""
        self.value = UNSET

    def same_declaration(self, other: Argument) -> bool:
        """Compare every declared field, ignoring the transient value."""
        return all(
            getattr(self, f.name) == getattr(other, f.name)
            for f in dataclasses.fields(self)
            if f.name != "value"
        )


def plugin_argument(
    name: str | None = None,
    *,
    default: Any = None,
    optional: bool = False,
    group: str = INITIALIZE,
    validator: Callable[[Any], bool] | None = None,
    type: Any = None,
    simple: bool = False,
    description: str | None = None,
) -> Argument:
    """
    Declare a constructor argument.

    Used as a class attribute on a Plugin subclass, the attribute name
    becomes the argument name:

        class Backup(Plugin):
            target = plugin_argument(description="backup target")
            retries = plugin_argument(optional=True, default="3")
    """
    return Argument(
        name=name,
        group=group,
        default=default,
        optional=optional,
        validator=validator,
        type_hint=ArgumentType.from_hint(type),
        simple=simple,
        description=description,
    )


def command_line_parameter(
    name: str | None = None,
    *,
    group: str = PARAMETER,
    type: Any = None,
    simple: bool = False,
    default: Any = None,
    description: str | None = None,
) -> Argument:
    """Declare a command line parameter that the constructor never consumes."""
    return Argument(
        name=name,
        group=group,
        default=default,
        optional=True,
        type_hint=ArgumentType.from_hint(type),
        simple=simple,
        description=description,
    )


_RECOGNIZED_SETTINGS = ("disabled", "skip_auto_initialization")


@dataclass
class PluginSettings:
    """Settings respected by the plugin manager."""

    disabled: bool = False
    skip_auto_initialization: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        if name in _RECOGNIZED_SETTINGS:
            return getattr(self, name)
        return self.extra.get(name, default)

    def set(self, name: str, value: Any) -> None:
        if name in _RECOGNIZED_SETTINGS:
            setattr(self, name, bool(value))
        else:
            self.extra[name] = value

    def update(self, settings: dict[str, Any]) -> None:
        for name, value in settings.items():
            self.set(name, value)

    def copy(self) -> PluginSettings:
        return PluginSettings(
            disabled=self.disabled,
            skip_auto_initialization=self.skip_auto_initialization,
            extra=dict(self.extra),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "disabled": self.disabled,
            "skip_auto_initialization": self.skip_auto_initialization,
            **self.extra,
        }


@dataclass(eq=False)
class PluginType:
    """Declarations of one plugin class."""

    name: str
    plugin_class: type | None = None
    opt_token: str | None = None
    arguments: list[Argument] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    settings: PluginSettings = field(default_factory=PluginSettings)

    def derive(
        self,
        name: str,
        plugin_class: type | None = None,
        opt_token: str | None = None,
    ) -> PluginType:
        """
        Create the descriptor of a subclass.

        Arguments are copied by value in declaration order and settings are
        copied shallowly, so the subclass can redeclare or mutate them
        without touching this type or its siblings. Groups stay behind.
        """
        return PluginType(
            name=name,
            plugin_class=plugin_class,
            opt_token=opt_token,
            arguments=[argument.copy() for argument in self.arguments],
            settings=self.settings.copy(),
        )

    def add_argument(self, argument: Argument) -> Argument:
        if not argument.name:
            raise ValueError("plugin arguments need a name")
        self.arguments.append(argument)
        return argument

    def add_group(self, group: str) -> None:
        if group not in self.groups:
            self.groups.append(group)

    def set_setting(self, name: str, value: Any) -> None:
        self.settings.set(name, value)

    def setting(self, name: str, default: Any = None) -> Any:
        return self.settings.get(name, default)

    @property
    def disabled(self) -> bool:
        return self.settings.disabled

    @property
    def skip_auto_initialization(self) -> bool:
        return self.settings.skip_auto_initialization

    def get_arguments(self, groups: Iterable[str] | None = None) -> list[Argument]:
        """Return arguments, optionally only those in the given groups."""
        if groups is None:
            return list(self.arguments)
        wanted = {groups} if isinstance(groups, str) else set(groups)
        return [argument for argument in self.arguments if argument.group in wanted]

    def argument(self, name: str) -> Argument | None:
        """Return the first argument declared with this name."""
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None

    def arguments_required(self) -> bool:
        """Whether construction needs at least one supplied value."""
        return any(
            argument.group == INITIALIZE and not argument.optional
            for argument in self.arguments
        )

    def reset_values(self) -> None:
        for argument in self.arguments:
            argument.reset()

    def __repr__(self) -> str:
        return f"<PluginType {self.name} arguments={[a.name for a in self.arguments]}>"
