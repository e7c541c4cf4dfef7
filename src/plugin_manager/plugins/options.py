"""
Command line binding for plugin arguments.

Turns the argument descriptors of every registered plugin into click
options. Parsed values are written into a result mapping keyed by plugin
name then argument name, and onto the descriptor itself.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import click
from click.core import ParameterSource

from plugin_manager.core.logging import get_logger
from plugin_manager.plugins.arguments import Argument, PluginType

if TYPE_CHECKING:
    from plugin_manager.plugins.manager import PluginManager

logger = get_logger(__name__)

ParsedOptions = dict[str, dict[str, Any]]

_PARSED_SOURCES = (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)


def flag_name(opt_token: str, argument_name: str) -> str:
    """Build the long flag name, rendering underscores as hyphens."""
    return f"--{opt_token}-{argument_name}".replace("_", "-")


def param_name(opt_token: str, argument_name: str) -> str:
    """Build a unique Python identifier used as the click parameter name."""
    return re.sub(r"\W", "_", f"{opt_token}__{argument_name}")


def help_text(argument: Argument) -> str | None:
    """Description followed by the default value annotation."""
    parts = []
    if argument.description:
        parts.append(argument.description)
    if argument.default is not None:
        parts.append(f"(default: {argument.default})")
    return " ".join(parts) or None


def opt_token_for(plugin_type: PluginType, scope: str | None = None) -> str:
    """Flag prefix of a plugin: its opt token, else its name without scope."""
    if plugin_type.opt_token:
        return plugin_type.opt_token
    name = plugin_type.name
    if scope and name.startswith(scope + "."):
        name = name[len(scope) + 1 :]
    return name


def _was_parsed(ctx: click.Context, param: click.Parameter) -> bool:
    if param.name is None:
        return False
    return ctx.get_parameter_source(param.name) in _PARSED_SOURCES


class _ArgumentCallback:
    """Option callback writing parsed values into the result and the descriptor."""

    def __init__(self, result: ParsedOptions, plugin_name: str, argument: Argument) -> None:
        self.result = result
        self.plugin_name = plugin_name
        self.argument = argument

    def __call__(self, ctx: click.Context, param: click.Parameter, value: Any) -> Any:
        if not _was_parsed(ctx, param):
            return value

        values = self.result.setdefault(self.plugin_name, {})
        name = self.argument.name

        if self.argument.is_list:
            if values.get(name) is None:
                values[name] = []
                self.argument.value = values[name]
            # click hands over every occurrence at once, in command line order
            values[name].extend(value)
        else:
            if self.argument.is_boolean:
                value = bool(value)
            values[name] = value
            self.argument.value = value

        return value


def build_option(
    result: ParsedOptions,
    plugin_name: str,
    opt_token: str,
    argument: Argument,
) -> click.Option:
    """Create the click option of one argument."""
    name = param_name(opt_token, argument.name or "")
    flag = flag_name(opt_token, argument.name or "")
    callback = _ArgumentCallback(result, plugin_name, argument)
    help = help_text(argument)

    if argument.is_boolean:
        if argument.simple:
            decls = [name, flag]
        else:
            decls = [name, f"{flag}/--no-{flag[2:]}"]
        return click.Option(
            decls,
            is_flag=True,
            help=help,
            callback=callback,
            expose_value=False,
        )

    return click.Option(
        [name, flag],
        type=str,
        multiple=argument.is_list,
        metavar="STRING",
        help=help,
        callback=callback,
        expose_value=False,
    )


def bind_options(
    manager: PluginManager,
    command: click.Command,
    argument_groups: Iterable[str] | None = None,
) -> ParsedOptions:
    """
    Add one option per plugin argument to a click command.

    Args:
        manager: Plugin manager whose registered plugins are bound
        command: Command the options are appended to
        argument_groups: Only bind arguments in these groups; None binds all

    Returns:
        Mapping filled in while click parses: {plugin name: {argument: value}}
    """
    result: ParsedOptions = {}
    groups = None if argument_groups is None else list(argument_groups)

    for plugin_type in manager.plugin_types():
        opt_token = opt_token_for(plugin_type, manager.scope)
        seen: set[str | None] = set()

        for argument in plugin_type.get_arguments(groups):
            # only the first declaration of a name is ever resolved
            if argument.name in seen:
                continue
            seen.add(argument.name)

            command.params.append(build_option(result, plugin_type.name, opt_token, argument))
            logger.debug(
                "Bound plugin argument",
                plugin=plugin_type.name,
                argument=argument.name,
                flag=flag_name(opt_token, argument.name or ""),
            )

    return result
