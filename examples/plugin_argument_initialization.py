#!/usr/bin/env python3
"""
Forward plugin flags to an external command.

Arguments in the "command_line" group are never consumed by the
constructor; this plugin collects the parsed ones into a flag list and
hands them to /bin/echo.

    $ python examples/plugin_argument_initialization.py --EchoCommand-help
    $ /bin/echo --help test
"""

from __future__ import annotations

import subprocess
import sys

import click

from plugin_manager import MissingArgumentsError, Plugin, command_line_parameter
from plugin_manager.plugins import ArgumentResolution, get_plugin_manager


class EchoCommand(Plugin):
    help = command_line_parameter(
        group="command_line", type=bool, simple=True, description="show help"
    )
    message = command_line_parameter(group="command_line", description="message to echo")

    def initialize_argument(self, resolution: ArgumentResolution) -> None:
        super().initialize_argument(resolution)

        if not hasattr(self, "command_line_arguments"):
            self.command_line_arguments: list[str] = []

        if resolution.group != "command_line":
            return

        argument = resolution.argument
        if not resolution.descriptor_valid:
            if not argument.optional:
                raise MissingArgumentsError([resolution.name])
        elif argument.simple:
            self.command_line_arguments.append(f"--{resolution.name}")
        else:
            self.command_line_arguments += [f"--{resolution.name}", argument.value]

    def run(self) -> None:
        command = ["/bin/echo", *self.command_line_arguments, "test"]

        click.echo("$ " + " ".join(command))
        output = subprocess.run(command, capture_output=True, text=True, check=True)
        click.echo(output.stdout, nl=False)


def main(argv: list[str] | None = None) -> None:
    manager = get_plugin_manager()
    command = click.Command("plugin_argument_initialization", add_help_option=False)
    manager.extend_command(command)
    command.main(argv if argv is not None else sys.argv[1:], standalone_mode=False)

    plugin = manager["EchoCommand"]()
    plugin.run()


if __name__ == "__main__":
    main()
