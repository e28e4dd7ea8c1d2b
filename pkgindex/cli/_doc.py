"""Document retrieval commands (ls, get, dump)."""

import click

from pkgindex.cli import console, format_size, format_timestamp
from pkgindex.exceptions import PkgIndexError


@click.command()
@click.argument("shortpath", required=False)
@click.pass_obj
def ls(ctx_obj, shortpath):
    """List files below a short path.

    Usage:
    pkgindex ls
    pkgindex ls mypackage
    pkgindex ls mypackage/src
    """
    try:
        docs = ctx_obj.table.get_shortpath_below(shortpath)
    except (PkgIndexError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not docs:
        console.print("[yellow]No files found.[/yellow]")
        return

    from rich.table import Table

    table = Table(box=None)
    table.add_column("Size", justify="right", style="green")
    table.add_column("Date", style="blue")
    table.add_column("Path", style="white")

    for d in sorted(docs, key=lambda d: (d.package, d.restpath)):
        size = len(d.content.encode("utf-8"))
        table.add_row(format_size(size), format_timestamp(d.timestamp), d.shortpath)

    console.print(table)


@click.command()
@click.argument("shortpath")
@click.option("--line-numbers", is_flag=True, help="Show line numbers")
@click.pass_obj
def get(ctx_obj, shortpath, line_numbers):
    """Print the stored content of a file"""
    try:
        doc = ctx_obj.table.get_shortpath(shortpath)
    except (PkgIndexError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not doc:
        console.print(f"[red]Document not found:[/red] {shortpath}")
        raise SystemExit(1)

    console.print(f"[bold cyan]Path:[/bold cyan] {doc.path}")
    console.print("-" * 40)

    for i, line in enumerate(doc.content.splitlines(), 1):
        if line_numbers:
            console.print(f"[dim]{i:4} | [/dim]", end="")
        console.print(line, markup=False, highlight=False)


@click.command()
@click.pass_obj
def dump(ctx_obj):
    """Print every stored row (debugging aid)"""
    for path, package, restpath, content, timestamp, suffix in ctx_obj.table.dump():
        console.print(
            repr([path, package, restpath, content[:60], timestamp, suffix]),
            markup=False,
            highlight=False,
        )
