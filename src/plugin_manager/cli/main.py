"""
Plugin Manager CLI Main Entry Point.

Inspects registered plugins and initializes them from command line flags.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from plugin_manager import __version__
from plugin_manager.core.config import PluginManagerConfig, load_config
from plugin_manager.core.errors import GroupNotFoundError, PluginNotFoundError
from plugin_manager.core.logging import setup_logging
from plugin_manager.plugins.arguments import Argument
from plugin_manager.plugins.manager import PluginManager, get_plugin_manager
from plugin_manager.plugins.options import flag_name, opt_token_for

console = Console()


def get_manager(ctx: click.Context) -> PluginManager:
    """Get the plugin manager prepared by the cli group."""
    return ctx.obj["manager"]


def describe_argument(argument: Argument) -> str:
    """One-line summary of an argument for tables."""
    text = argument.name or ""
    if argument.optional:
        text = f"[{text}]"
    return text


@click.group()
@click.version_option(version=__version__, prog_name="plugin-manager")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--module", "-m", "modules", multiple=True, help="Plugin module to import")
@click.option(
    "--plugin-path",
    "-p",
    "plugin_paths",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory with plugin files",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    modules: tuple[str, ...],
    plugin_paths: tuple[Path, ...],
    json_output: bool,
    verbose: bool,
) -> None:
    """
    Plugin Manager - Inspect and initialize plugins.

    Plugins are imported from modules and directories given on the command
    line or in the configuration file.
    """
    ctx.ensure_object(dict)

    settings = PluginManagerConfig.load(config) if config else load_config()
    if verbose:
        settings.logging = settings.logging.model_copy(update={"level": "DEBUG"})
    setup_logging(settings.logging)

    manager = ctx.obj.get("manager")
    if manager is None:
        manager = get_plugin_manager()
    manager.config = settings
    if settings.scope is not None:
        manager.scope = settings.scope

    manager.load_modules([*settings.plugin_modules, *modules])
    for path in [*settings.plugin_directories, *plugin_paths]:
        manager.load_from_path(path)

    ctx.obj["config"] = settings
    ctx.obj["manager"] = manager
    ctx.obj["json_output"] = json_output


@cli.command("list")
@click.option("--group", "-g", help="Only list plugins of this group")
@click.pass_context
def list_plugins(ctx: click.Context, group: str | None) -> None:
    """List registered plugins."""
    manager = get_manager(ctx)

    try:
        plugin_classes = [plugin for plugin, _ in manager.each(group=group)]
    except GroupNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if ctx.obj.get("json_output"):
        data = [
            {
                "name": plugin.plugin_type.name,
                "opt_token": opt_token_for(plugin.plugin_type, manager.scope),
                "groups": plugin.plugin_groups(),
                "arguments": [a.name for a in plugin.arguments()],
                "arguments_required": plugin.arguments_required(),
                "settings": plugin.plugin_type.settings.to_dict(),
            }
            for plugin in plugin_classes
        ]
        click.echo(json.dumps(data, indent=2, default=str))
        return

    table = Table(title="Plugins" if group is None else f"Plugins in {group}")
    table.add_column("Name", style="cyan")
    table.add_column("Flag Prefix", style="white")
    table.add_column("Groups", style="magenta")
    table.add_column("Arguments", style="green")
    table.add_column("Required", style="yellow")
    table.add_column("Status", style="red")

    for plugin in plugin_classes:
        plugin_type = plugin.plugin_type
        status = "manual" if plugin_type.skip_auto_initialization else "auto"
        if manager.instance(manager.unscoped_name(plugin_type.name)) is not None:
            status = "initialized"
        table.add_row(
            plugin_type.name,
            opt_token_for(plugin_type, manager.scope),
            ", ".join(plugin_type.groups),
            ", ".join(describe_argument(a) for a in plugin_type.arguments),
            "yes" if plugin_type.arguments_required() else "no",
            status,
        )

    console.print(table)


@cli.command("arguments")
@click.argument("name")
@click.pass_context
def show_arguments(ctx: click.Context, name: str) -> None:
    """Show the argument declarations of a plugin."""
    manager = get_manager(ctx)

    try:
        plugin = manager[name]
    except PluginNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    plugin_type = plugin.plugin_type
    opt_token = opt_token_for(plugin_type, manager.scope)

    if ctx.obj.get("json_output"):
        data = [
            {
                "name": a.name,
                "group": a.group,
                "flag": flag_name(opt_token, a.name or ""),
                "type": a.type_hint.name.lower(),
                "optional": a.optional,
                "default": a.default,
                "description": a.description,
            }
            for a in plugin_type.arguments
        ]
        click.echo(json.dumps(data, indent=2, default=str))
        return

    table = Table(title=f"Arguments of {plugin_type.name}")
    table.add_column("Name", style="cyan")
    table.add_column("Group", style="magenta")
    table.add_column("Flag", style="white")
    table.add_column("Type", style="yellow")
    table.add_column("Optional", style="green")
    table.add_column("Default", style="green")
    table.add_column("Description")

    for argument in plugin_type.arguments:
        table.add_row(
            argument.name or "",
            argument.group,
            flag_name(opt_token, argument.name or ""),
            argument.type_hint.name.lower(),
            "yes" if argument.optional else "no",
            "" if argument.default is None else str(argument.default),
            argument.description or "",
        )

    console.print(table)


@cli.command(
    "run",
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
@click.option(
    "--argument-group",
    "-a",
    "argument_groups",
    multiple=True,
    help="Only expose arguments of this group (repeatable)",
)
@click.argument("plugin_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run_plugins(
    ctx: click.Context,
    argument_groups: tuple[str, ...],
    plugin_args: tuple[str, ...],
) -> None:
    """
    Initialize plugins from plugin flags.

    Every plugin argument is available as --<plugin>-<argument>; pass
    --help after -- to list them.
    """
    manager = get_manager(ctx)
    settings: PluginManagerConfig = ctx.obj["config"]

    groups: list[str] | None = list(argument_groups) or settings.argument_groups
    plugin_command = click.Command("plugins", help="Plugin arguments")
    parsed = manager.extend_command(plugin_command, argument_groups=groups)

    try:
        plugin_command.main(
            list(plugin_args),
            prog_name=f"{ctx.command_path} --",
            standalone_mode=False,
        )
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)

    if "--help" in plugin_args:
        return

    created = manager.initialize_plugins(
        settings.plugin_options(parsed),
        defaults=settings.defaults,
    )

    if ctx.obj.get("json_output"):
        data: dict[str, Any] = {
            "initialized": sorted(created),
            "skipped": sorted(name for name in manager if name not in created),
        }
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title="Plugin Initialization")
    table.add_column("Plugin", style="cyan")
    table.add_column("Result")

    for name in manager:
        if name in created:
            table.add_row(name, "[green]initialized[/green]")
        else:
            table.add_row(name, "[yellow]skipped[/yellow]")

    console.print(table)


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
