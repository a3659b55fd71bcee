"""
CLI Retrieval Commands

Search the index and export it as a document.
"""

import sqlite3
from pathlib import Path
from typing import FrozenSet, Optional

import typer

from codeindex.exceptions import CodeIndexError
from codeindex.export import export_symbols
from codeindex.schemas import SearchRequest, SymbolKind
from codeindex.storage import SQLiteStorage
from codeindex.user_config import get_user_config
from .config import CLIConfig
from .output import echo, fail, get_console, print_json, symbol_line, symbol_table, symbols_payload

console = get_console()


def parse_kinds(kinds: Optional[str]) -> Optional[FrozenSet[SymbolKind]]:
    """Parse a comma-separated kind list such as 'class,method'."""
    if not kinds:
        return None
    names = [k for k in kinds.split(CLIConfig.KIND_SEPARATOR) if k.strip()]
    return frozenset(SymbolKind.parse(name) for name in names) or None


def require_index(db: Path) -> None:
    if not db.is_file():
        fail(f"Index not found at '{db}'", hint=f"codeindex index <project> {db}")


def search(
    db: Path = typer.Argument(..., help="Index database file."),
    query: Optional[str] = typer.Option(
        None, "--query", "-q", help="Name text to match; 'Container::name' scopes to a class or package."
    ),
    kinds: Optional[str] = typer.Option(
        None, "--kinds", "-k", help="Comma-separated symbol kinds (e.g. CLASS,METHOD)."
    ),
    file_glob: Optional[str] = typer.Option(
        None, "--file", "-f", help="GLOB pattern matched against stored file paths."
    ),
    class_name: Optional[str] = typer.Option(None, "--class", "-c", help="Enclosing class substring."),
    package_name: Optional[str] = typer.Option(None, "--package", "-p", help="Package substring."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", min=0, help="Maximum results. Default from config (1000)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
    table_output: bool = typer.Option(False, "--table", help="Output results as a table."),
):
    """
    Search the symbol index.
    """
    require_index(db)
    if limit is None:
        limit = get_user_config().get("search.default_limit")

    try:
        request = SearchRequest.build(
            query=query,
            kinds=parse_kinds(kinds),
            class_name=class_name,
            package_name=package_name,
            file_path_glob=file_glob,
            limit=limit,
        )
        with SQLiteStorage(db) as store:
            results = store.search(request)
    except (CodeIndexError, ValueError, sqlite3.Error) as e:
        fail(str(e))

    if json_output:
        print_json(symbols_payload(results))
    elif table_output:
        console.print(symbol_table(results, title=f"{len(results)} symbols"))
    else:
        for symbol in results:
            echo(symbol_line(symbol))


def export(
    db: Path = typer.Argument(..., help="Index database file."),
    output: Path = typer.Argument(..., help="File to write."),
    fmt: Optional[str] = typer.Option(
        None, "--format", help="Export format: markdown or xml. Default from config."
    ),
    kinds: Optional[str] = typer.Option(
        None, "--kinds", "-k", help="Comma-separated symbol kinds to include."
    ),
):
    """
    Export the whole index as Markdown or XML.
    """
    require_index(db)
    if fmt is None:
        fmt = get_user_config().get("export.format", "markdown")

    try:
        count = export_symbols(db, output, fmt=fmt, kinds=parse_kinds(kinds))
    except (CodeIndexError, ValueError, OSError, sqlite3.Error) as e:
        fail(str(e))

    console.print(f"Exported [bold green]{count}[/bold green] symbols to [bold]{output}[/bold].")
