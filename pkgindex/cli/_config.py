"""Config command group."""

import click

from pkgindex.cli import console
from pkgindex.models.config import get_default_config_path

SETTABLE_KEYS = ("db_path", "log_level")


@click.group(name="config")
def config_group():
    """Manage configuration"""
    pass


@config_group.command(name="show")
@click.pass_obj
def config_show(ctx_obj):
    """Show current configuration"""
    console.print(f"Config path: [cyan]{get_default_config_path()}[/cyan]")

    from rich.table import Table

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("db_path", ctx_obj.config.db_path)
    table.add_row("log_level", ctx_obj.config.log_level)
    table.add_row("Packages count", str(len(ctx_obj.config.packages)))

    console.print(table)


@config_group.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def config_set(ctx_obj, key, value):
    """Set a configuration value"""
    if key not in SETTABLE_KEYS:
        console.print(f"[red]Error:[/red] Unknown key '{key}'")
        raise SystemExit(1)

    setattr(ctx_obj.config, key, value)
    ctx_obj.config.save()
    console.print(f"[green]Set {key} to:[/green] {value}")
