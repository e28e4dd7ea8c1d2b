"""Package registration and indexing commands."""

import os

import click

from pkgindex.cli import console, report_counts
from pkgindex.index.crawler import index_package
from pkgindex.models.config import PackageConfig


@click.command()
@click.argument("path")
@click.option("--name", help="Package name (default: basename of path)")
@click.option("--glob", default="**/*", help="Glob pattern (default: **/*)")
@click.option("--ignore", multiple=True, help="fnmatch pattern to skip (repeatable)")
@click.pass_obj
def add(ctx_obj, path, name, glob, ignore):
    """Register a package directory and index it"""
    abs_path = os.path.abspath(path)
    if not os.path.isdir(abs_path):
        console.print(f"[red]Error:[/red] Path {abs_path} is not a directory")
        raise SystemExit(1)

    name = name or os.path.basename(os.path.normpath(abs_path))
    if ctx_obj.config.find_package(name):
        console.print(f"[red]Error:[/red] Package '{name}' already exists")
        raise SystemExit(1)

    package = PackageConfig(
        name=name, path=abs_path, glob_pattern=glob, ignore=list(ignore)
    )
    ctx_obj.config.packages.append(package)
    ctx_obj.config.save()
    console.print(f"[green]Added package:[/green] {name} -> {abs_path}")

    try:
        counts = index_package(ctx_obj.table, package)
    except (OSError, UnicodeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(f"  {report_counts(counts)}")


@click.command()
@click.argument("name", required=False)
@click.pass_obj
def update(ctx_obj, name):
    """Re-scan one or all registered packages"""
    packages = ctx_obj.config.packages
    if name:
        package = ctx_obj.config.find_package(name)
        if package is None:
            console.print(f"[red]Error:[/red] Package '{name}' not found")
            raise SystemExit(1)
        packages = [package]

    if not packages:
        console.print("[yellow]No packages to update.[/yellow]")
        return

    n = len(packages)
    for i, package in enumerate(packages, 1):
        console.print(f"[cyan][{i}/{n}][/cyan] [bold]{package.name}[/bold]")
        try:
            counts = index_package(ctx_obj.table, package)
        except (OSError, UnicodeError) as e:
            console.print(f"  [red]Error:[/red] {e}")
            raise SystemExit(1)
        console.print(f"  {report_counts(counts)}")


@click.command()
@click.argument("name")
@click.pass_obj
def remove(ctx_obj, name):
    """Unregister a package and delete its documents"""
    if ctx_obj.config.find_package(name) is None:
        console.print(f"[red]Error:[/red] Package '{name}' not found")
        raise SystemExit(1)

    ctx_obj.config.packages = [p for p in ctx_obj.config.packages if p.name != name]
    ctx_obj.config.save()

    docs = ctx_obj.table.get_shortpath_below(name)
    for doc in docs:
        ctx_obj.table.remove(doc.path)
    console.print(f"[yellow]Removed package:[/yellow] {name} ({len(docs)} documents)")


@click.command(name="list")
@click.pass_obj
def list_packages(ctx_obj):
    """List registered packages"""
    if not ctx_obj.config.packages:
        console.print("No packages registered.")
        return

    from rich.table import Table

    counts = ctx_obj.table.package_counts()

    table = Table(title="Packages")
    table.add_column("Name", style="cyan")
    table.add_column("Path", style="magenta")
    table.add_column("Glob", style="green")
    table.add_column("Docs", justify="right")

    for p in ctx_obj.config.packages:
        table.add_row(p.name, p.path, p.glob_pattern, str(counts.get(p.name, 0)))

    console.print(table)
