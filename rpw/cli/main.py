"""
Main CLI entry point for Resource Pack Workbench.

This module defines the Click command group and the opener subcommands.
"""

import sys
from pathlib import Path

import click

from rpw.models.settings import Settings
from rpw.utils.app_info import AppInfo
from rpw.utils.constants import EditorKind
from rpw.utils.desktop import DesktopApi
from rpw.utils.log import Log


class Context:
    """Objects shared by every subcommand, created once per invocation."""

    def __init__(self, log: Log, settings: Settings) -> None:
        self.log = log
        self.settings = settings
        self.desktop = DesktopApi(log, settings)


@click.group()
@click.version_option(version=AppInfo().app_version, prog_name="rpw")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Mirror the log to stdout/stderr.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Resource Pack Workbench - open pack files with external programs"""
    log = Log(print_to_stdout=verbose)
    log.init()

    # Loaded after the log is up so settings problems end up in the log file
    settings = Settings()
    settings.load()
    log.enable(settings.logging_enabled)
    log.set_print_to_stdout(settings.log_to_stdout or verbose)

    ctx.obj = Context(log, settings)


def _finish(launched: bool, target: str) -> None:
    if not launched:
        click.echo(f"Could not find a program to open {target}", err=True)
        sys.exit(1)


@cli.command("browse")
@click.argument("uri")
@click.pass_obj
def browse(obj: Context, uri: str) -> None:
    """Open URI in a web browser."""
    obj.log.info(f"USER ACTION: browsing {uri}")
    _finish(obj.desktop.browse(uri), uri)


@cli.command("open")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_obj
def open_(obj: Context, path: Path) -> None:
    """Open PATH with its default application."""
    obj.log.info(f"USER ACTION: opening {path}")
    _finish(obj.desktop.open(path), str(path))


@cli.command("edit")
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--kind",
    type=click.Choice([kind.value for kind in EditorKind]),
    default=EditorKind.TEXT.value,
    show_default=True,
    help="Which configured editor to try first.",
)
@click.pass_obj
def edit(obj: Context, path: Path, kind: str) -> None:
    """Edit PATH as text, image or audio."""
    obj.log.info(f"USER ACTION: editing {path} as {kind}")
    _finish(obj.desktop.edit(EditorKind(kind), path), str(path))


if __name__ == "__main__":
    cli()
