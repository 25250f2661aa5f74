"""CLI entry point for dualschema.

Commands are loaded lazily so ``dualschema --help`` stays fast.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from dualschema import __version__
from dualschema.cli.output import set_no_color
from dualschema.observability import configure_from_settings, configure_logging

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that imports commands only when they are invoked.

    Attributes:
        lazy_subcommands: Command name to ``module.attribute`` path.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Registered and lazy command names, sorted."""
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Return a registered command, importing and registering lazy ones."""
        registered = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if registered is not None or cmd_name not in self.lazy_subcommands:
            return registered

        command = self._import_command(self.lazy_subcommands[cmd_name])
        self.add_command(command, cmd_name)
        return command

    @staticmethod
    def _import_command(import_path: str) -> click.Command:
        module_name, attr_name = import_path.rsplit(".", 1)
        command = getattr(importlib.import_module(module_name), attr_name)
        if not isinstance(command, click.Command):
            raise TypeError(f"{import_path} is not a click command")
        return command


LAZY_COMMANDS = {
    "compile": "dualschema.cli.commands.compile.compile_cmd",
    "export": "dualschema.cli.commands.export.export_cmd",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="dualschema")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Minimum log level written to stderr [default: DUALSCHEMA_LOG_LEVEL or WARNING].",
)
def cli(log_level: str | None) -> None:
    """dualschema - compile field declarations into validation and documentation schemas.

    **Getting Started:**

    - `dualschema compile schemas.yaml` - Compile and print documentation schemas
    - `dualschema compile schemas.yaml --validation` - Print validation descriptors
    - `dualschema export schemas.yaml -o openapi.json` - Write an OpenAPI document
    """
    from dualschema.config import CompilerSettings

    settings = CompilerSettings()
    if log_level is None:
        configure_from_settings(settings)
    else:
        configure_logging(log_level=log_level, json_format=settings.json_logs)


if __name__ == "__main__":
    cli()
