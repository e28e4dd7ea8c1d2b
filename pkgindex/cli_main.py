"""pkgindex CLI - Entry point for command line interface.

This module provides the main CLI entry point and imports all commands
from the modular cli subpackage.
"""

import logging

import click

from pkgindex.cli import Context
from pkgindex.cli._config import config_group
from pkgindex.cli._doc import dump, get, ls
from pkgindex.cli._package import add, list_packages, remove, update
from pkgindex.cli._search import search
from pkgindex.cli._system import cleanup, status


@click.group()
@click.option("--log-level", default=None, help="Log level (default: from config)")
@click.pass_context
def cli(ctx, log_level):
    """pkgindex - search source files across packages"""
    ctx.obj = Context()
    ctx.call_on_close(ctx.obj.close)

    level = log_level or ctx.obj.config.log_level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING))


# Register commands
cli.add_command(config_group)
cli.add_command(add)
cli.add_command(update)
cli.add_command(remove)
cli.add_command(list_packages)
cli.add_command(search)
cli.add_command(ls)
cli.add_command(get)
cli.add_command(dump)
cli.add_command(cleanup)
cli.add_command(status)


if __name__ == "__main__":
    cli()
