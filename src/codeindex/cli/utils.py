"""
CLI Utility Commands

Index statistics and text index maintenance.
"""

import sqlite3
from pathlib import Path

import typer
from rich.table import Table

from codeindex.exceptions import CodeIndexError
from codeindex.storage import SQLiteStorage
from .output import fail, get_console, print_json
from .retrieval import require_index

console = get_console()


def format_size(size_bytes: int) -> str:
    """Format byte size as e.g. "1.5 KB" or "2.3 MB"."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def stats(
    db: Path = typer.Argument(..., help="Index database file."),
    json_output: bool = typer.Option(False, "--json", help="Output statistics as JSON."),
):
    """
    Show symbol and file counts for an index.
    """
    require_index(db)
    try:
        with SQLiteStorage(db) as store:
            index_stats = store.get_stats()
    except (CodeIndexError, sqlite3.Error) as e:
        fail(str(e))

    if json_output:
        print_json(index_stats.model_dump(mode="json"))
        return

    table = Table(title=f"Index: {db}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Symbols", str(index_stats.total_symbols))
    table.add_row("Files", str(index_stats.total_files))
    table.add_row("Size", format_size(index_stats.db_size_bytes))
    table.add_row("Schema", index_stats.schema_version or "unknown")
    for kind, count in index_stats.symbol_kinds.items():
        table.add_row(f"  {kind}", str(count))
    console.print(table)


def verify(
    db: Path = typer.Argument(..., help="Index database file."),
    rebuild: bool = typer.Option(
        False, "--rebuild", help="Rebuild the text index when it is out of sync."
    ),
):
    """
    Check that the text index matches the symbols table.
    """
    require_index(db)
    try:
        with SQLiteStorage(db) as store:
            if store.verify_text_index():
                console.print("[green]Text index OK[/green]")
                return
            if not rebuild:
                fail("Text index is out of sync", hint=f"codeindex verify {db} --rebuild")
            store.rebuild_text_index()
            if not store.verify_text_index():
                fail("Text index still out of sync after rebuild")
    except (CodeIndexError, sqlite3.Error) as e:
        fail(str(e))

    console.print("[green]Text index rebuilt[/green]")
