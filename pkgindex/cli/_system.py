"""Status and cleanup commands."""

import os

import click

from pkgindex.cli import console, format_size


@click.command()
@click.pass_obj
def status(ctx_obj):
    """Show index status"""
    from rich.table import Table

    db_path = ctx_obj.config.db_path
    db_size = os.path.getsize(db_path) if os.path.exists(db_path) else 0

    table = Table(title="Index Status", show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Index", db_path)
    table.add_row("Index size", format_size(db_size))
    table.add_row("Packages", str(len(ctx_obj.config.packages)))
    table.add_row("Documents", str(ctx_obj.table.size()))
    console.print(table)

    counts = ctx_obj.table.package_counts()
    if counts:
        pkg_table = Table(title="Packages Break-down", box=None)
        pkg_table.add_column("Package", style="cyan")
        pkg_table.add_column("Docs", style="magenta")
        for name, count in counts.items():
            pkg_table.add_row(name, str(count))
        console.print(pkg_table)


@click.command()
@click.option("--package", "-p", help="Only check documents of this package")
@click.pass_obj
def cleanup(ctx_obj, package):
    """Remove documents whose file no longer exists"""

    def report(doc):
        console.print(f"  [dim]removed[/dim] {doc.shortpath}", highlight=False)

    if package:
        removed = ctx_obj.table.cleanup_package_name(package, report)
    else:
        removed = ctx_obj.table.cleanup(report)

    console.print(f"[bold green]Cleanup complete:[/bold green] {removed} documents removed")
