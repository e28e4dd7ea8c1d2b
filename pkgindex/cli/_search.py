"""Search command."""

import click
import json

from pydantic import ValidationError

from pkgindex.cli import console
from pkgindex.models.search import SearchOptions


def _matching_lines(content, patterns, max_lines=3):
    """First lines of ``content`` containing any pattern, case-insensitively."""
    needles = [p.lower() for p in patterns]
    hits = []
    for lineno, line in enumerate(content.splitlines(), 1):
        lowered = line.lower()
        if any(n in lowered for n in needles):
            hits.append((lineno, line.strip()))
            if len(hits) >= max_lines:
                break
    return hits


@click.command()
@click.argument("keywords", nargs=-1)
@click.option("--pattern", "patterns", multiple=True, help="Text the content must contain (AND)")
@click.option("--package", "-p", "packages", multiple=True, help="Package name (OR)")
@click.option("--path", "paths", multiple=True, help="Absolute path fragment (AND)")
@click.option("--restpath", "restpaths", multiple=True, help="Path fragment below the package (AND)")
@click.option("--suffix", "-s", "suffixes", multiple=True, help="File extension (OR)")
@click.option("--offset", default=0, type=int, help="Skip this many results")
@click.option("--limit", "-n", default=None, type=int, help="Maximum number of results")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["cli", "json", "files"]),
    default="cli",
    help="Output format (default: cli)",
)
@click.pass_obj
def search(ctx_obj, keywords, patterns, packages, paths, restpaths, suffixes,
           offset, limit, output_format):
    """Search indexed files.

    KEYWORDS match content, restpath or package name. Results are ordered by
    package, then by path within the package.
    """
    try:
        options = SearchOptions(
            keywords=list(keywords),
            patterns=list(patterns),
            packages=list(packages),
            paths=list(paths),
            restpaths=list(restpaths),
            suffixes=list(suffixes),
            offset=offset,
            limit=limit,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e.errors()[0]['msg']}")
        raise SystemExit(1)

    results = ctx_obj.table.search(options)

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    if output_format == "json":
        output = [
            {
                "package": d.package,
                "restpath": d.restpath,
                "path": d.path,
                "suffix": d.suffix,
                "timestamp": d.timestamp,
            }
            for d in results
        ]
        click.echo(json.dumps(output, ensure_ascii=False, indent=2))
    elif output_format == "files":
        for d in results:
            click.echo(d.shortpath)
    else:
        _output_cli(results, list(patterns) + list(keywords))


def _output_cli(results, needles):
    """Output results grouped by file with matching lines."""
    for d in results:
        console.print(f"[bold cyan]{d.shortpath}[/bold cyan]")
        if not needles:
            continue
        for lineno, line in _matching_lines(d.content, needles):
            console.print(f"  [dim]{lineno:4}:[/dim] ", end="")
            console.print(line, markup=False, highlight=False)
    console.print(f"\n[dim]{len(results)} result(s)[/dim]")
