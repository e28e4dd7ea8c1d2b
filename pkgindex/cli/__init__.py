"""CLI module - contains all CLI command implementations.

This module exports:
- Context: CLI context class
- console: Rich console for output
- report_counts: Summary line for an indexing run
"""

from datetime import datetime

from rich.console import Console

from pkgindex.database.document_table import DocumentTable
from pkgindex.models.config import AppConfig

console = Console()


class Context:
    """CLI context that holds config and the document table."""

    def __init__(self):
        self.config = AppConfig.load()
        self.table = DocumentTable.open(self.config.db_path)

    def close(self):
        self.table.close()


def report_counts(counts) -> str:
    return (
        f"[green]{counts.get('newfile', 0)}[/green] new, "
        f"[cyan]{counts.get('update', 0)}[/cyan] updated, "
        f"[dim]{counts.get('unchanged', 0)} unchanged[/dim], "
        f"[yellow]{counts.get('removed', 0)}[/yellow] removed"
    )


def format_size(size: int) -> str:
    """Format file size in human-readable format."""
    if size < 1024:
        return f"{size} B"
    elif size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    else:
        return f"{size / (1024 * 1024):.1f} MB"


def format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")
