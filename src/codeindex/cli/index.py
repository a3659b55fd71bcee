"""
CLI Index Command

Crawls a project and appends its symbols to an index database.
"""

import sqlite3
from pathlib import Path
from typing import Optional

import typer

from codeindex.exceptions import CodeIndexError
from codeindex.indexer import CodeIndexer
from codeindex.user_config import get_user_config
from .output import fail, get_console, print_json

console = get_console()


def index(
    project: Path = typer.Argument(..., help="Project root to index."),
    db: Path = typer.Argument(..., help="Index database file (created if missing)."),
    fresh: bool = typer.Option(
        False, "--fresh", help="Empty the index before indexing instead of appending."
    ),
    respect_gitignore: Optional[bool] = typer.Option(
        None,
        "--respect-gitignore/--no-respect-gitignore",
        help="Skip paths matched by .gitignore and default ignore patterns. Default from config.",
    ),
    max_bytes: Optional[int] = typer.Option(
        None, "--max-bytes", help="Skip files larger than this size (in bytes). Default from config."
    ),
    json_output: bool = typer.Option(False, "--json", help="Output the run report as JSON."),
):
    """
    Index every supported source file under PROJECT into DB.
    """
    config = get_user_config()
    if respect_gitignore is None:
        respect_gitignore = bool(config.get("index.respect_gitignore", False))
    if max_bytes is None:
        max_bytes = config.get("index.max_bytes")

    indexer = CodeIndexer(db)
    try:
        report = indexer.index(
            project,
            fresh=fresh,
            respect_gitignore=respect_gitignore,
            max_bytes=max_bytes,
        )
    except (CodeIndexError, ValueError, sqlite3.Error) as e:
        fail(str(e))

    if json_output:
        print_json(report.model_dump(mode="json"))
        return

    console.print(
        f"Indexed [bold blue]{report.files_indexed}[/bold blue] files and "
        f"[bold green]{report.symbols_saved}[/bold green] symbols to [bold]{db}[/bold] "
        f"in {report.duration_seconds:.2f}s."
    )
    if report.failures:
        console.print(f"[yellow]{report.files_failed} files failed:[/yellow]")
        for failure in report.failures:
            console.print(f"  - {failure.file_path}: {failure.error}", markup=False)
