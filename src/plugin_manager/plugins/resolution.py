"""
Plugin argument resolution.

Decides, for every declared argument of a plugin type, which value it
receives at construction time and whether construction has to fail.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from plugin_manager.core.errors import MissingArgumentsError
from plugin_manager.core.logging import get_logger
from plugin_manager.plugins.arguments import INITIALIZE, Argument, PluginType

logger = get_logger(__name__)


class OptionsShape(Enum):
    """Classification of the configuration passed to a plugin constructor."""

    EMPTY = auto()
    UNSUPPORTED = auto()
    MAPPING = auto()


def classify_options(options: Any) -> OptionsShape:
    """Classify supplied options once per construction."""
    if options is None:
        return OptionsShape.EMPTY
    if not isinstance(options, Mapping):
        return OptionsShape.UNSUPPORTED
    return OptionsShape.MAPPING


def is_value_valid(argument: Argument, value: Any) -> bool:
    """
    Run the argument's validator; arguments without one accept anything.

    A validator that raises rejects the value.
    """
    if argument.validator is None:
        return True
    try:
        return bool(argument.validator(value))
    except Exception as e:
        logger.debug(
            "Validator rejected argument value",
            argument=argument.name,
            error_type=type(e).__name__,
            error=str(e),
        )
        return False


def is_argument_valid(argument: Argument, options: Any = None, source: str = "options") -> bool:
    """
    Check whether an argument has a usable value.

    With source "options" the value is looked up in the supplied mapping,
    with source "value" the argument's last parsed value is checked.
    """
    if source == "value":
        return argument.is_value_set and is_value_valid(argument, argument.value)
    if source != "options":
        raise ValueError(f"unknown argument source: {source}")
    if classify_options(options) is not OptionsShape.MAPPING:
        return False
    return argument.name in options and is_value_valid(argument, options[argument.name])


@dataclass
class ArgumentResolution:
    """Outcome of resolving one argument."""

    argument: Argument
    shape: OptionsShape
    candidate_valid: bool = False
    descriptor_valid: bool = False
    value: Any = None
    missing: bool = False
    source: str = "unresolved"

    @property
    def name(self) -> str:
        return self.argument.name or ""

    @property
    def group(self) -> str:
        return self.argument.group

    @property
    def options_empty(self) -> bool:
        return self.shape is OptionsShape.EMPTY

    @property
    def options_unsupported(self) -> bool:
        return self.shape is OptionsShape.UNSUPPORTED


def resolve_argument(
    argument: Argument, options: Any, shape: OptionsShape | None = None
) -> ArgumentResolution:
    """
    Compute the value of a single argument.

    A value parsed onto the descriptor wins over a supplied one when both
    pass validation. Without any valid value, optional arguments fall back
    to their default and required constructor arguments are marked missing.
    """
    if shape is None:
        shape = classify_options(options)

    resolution = ArgumentResolution(argument=argument, shape=shape)
    resolution.candidate_valid = is_argument_valid(argument, options)
    resolution.descriptor_valid = is_argument_valid(argument, source="value")

    # Parsed values are only consulted when a mapping was supplied.
    if shape is OptionsShape.MAPPING and resolution.descriptor_valid:
        resolution.value = argument.value
        resolution.source = "descriptor"
    elif shape is OptionsShape.MAPPING and resolution.candidate_valid:
        resolution.value = options[argument.name]
        resolution.source = "options"
    elif argument.optional:
        resolution.value = argument.default
        resolution.source = "default"
    else:
        resolution.missing = argument.group == INITIALIZE
        resolution.source = "missing" if resolution.missing else "unresolved"

    return resolution


ArgumentHook = Callable[[ArgumentResolution], None]


def resolve_arguments(
    plugin_type: PluginType,
    options: Any = None,
    on_argument: ArgumentHook | None = None,
) -> dict[str, Any]:
    """
    Resolve every argument of a plugin type.

    on_argument is called once per argument, in declaration order, after the
    base decision. It may raise MissingArgumentsError to flag arguments of
    its own. Only the first declaration of a name is resolved.

    Returns the constructor group values keyed by argument name.

    Raises:
        MissingArgumentsError: naming every required argument without a valid value.
    """
    shape = classify_options(options)
    if shape is OptionsShape.UNSUPPORTED:
        logger.debug(
            "Ignoring unsupported plugin options",
            plugin=plugin_type.name,
            options_type=type(options).__name__,
        )

    values: dict[str, Any] = {}
    missing: list[str] = []
    seen: set[str] = set()

    for argument in plugin_type.arguments:
        if argument.name in seen:
            continue
        seen.add(argument.name)

        resolution = resolve_argument(argument, options, shape)
        if resolution.missing:
            missing.append(resolution.name)

        if on_argument is not None:
            try:
                on_argument(resolution)
            except MissingArgumentsError as e:
                names = e.arguments or [resolution.name]
                missing.extend(name for name in names if name not in missing)

        if argument.group == INITIALIZE and not resolution.missing:
            values[resolution.name] = resolution.value

    if missing:
        raise MissingArgumentsError(missing)

    return values
