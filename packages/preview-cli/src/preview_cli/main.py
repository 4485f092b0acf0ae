"""The ``preview`` command group.

Subcommands are named in LAZY_COMMANDS and imported on first use, so
``preview --help`` and ``preview --version`` never load the compiler.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from preview_cli import __version__
from preview_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True

# Command name -> "module:attribute" of its click.Command
LAZY_COMMANDS = {
    "compile": "preview_cli.commands.compile:compile_cmd",
}


class LazyGroup(rclick.RichGroup):
    """RichGroup that imports its ``lazy_commands`` on demand."""

    def __init__(self, *args: Any, lazy_commands: dict[str, str] | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.lazy_commands = dict(lazy_commands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_commands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if command is None and cmd_name in self.lazy_commands:
            command = self._import(cmd_name)
        return command

    def _import(self, cmd_name: str) -> click.Command:
        module_name, _, attr_name = self.lazy_commands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_name), attr_name)
        if not isinstance(command, click.Command):
            raise TypeError(f"{module_name}:{attr_name} is not a click command")
        return command


def _no_color(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if value:
        set_no_color(True)


def _log_level(ctx: click.Context, param: click.Parameter, value: str | None) -> None:
    if value is not None:
        from preview_core.observability import configure_logging

        configure_logging(log_level=value, json_format=False)


@click.group(cls=LazyGroup, lazy_commands=LAZY_COMMANDS)
@click.version_option(__version__, prog_name="preview")
@click.option(
    "--no-color",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_no_color,
    help="Disable colored output.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    expose_value=False,
    callback=_log_level,
    help="Log process events to stderr at this level.",
)
def cli() -> None:
    """Catalog Preview - compile a node's catalog in two environments.

    The catalog is compiled once in the node's own environment (the
    baseline) and once in a preview environment, so a change can be
    compared before it is promoted.

    **Example:**

    - `preview compile web01 --preview-env prod_v2 --backend mypkg:Backend`
    """


if __name__ == "__main__":
    cli()
