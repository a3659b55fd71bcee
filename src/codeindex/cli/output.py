"""
CLI Output Utilities

Plain, JSON and table renderings shared by the commands.
"""

import json
from typing import Any, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from codeindex.cli.config import CLIConfig
from codeindex.schemas import Symbol

_console = Console(highlight=False)


def get_console() -> Console:
    """Get the console instance for rich output."""
    return _console


def echo(message: str = "", **kwargs) -> None:
    typer.echo(message, **kwargs)


def print_json(data: Any) -> None:
    """Print JSON data, pretty printed."""
    echo(json.dumps(data, indent=2))


def print_error(message: str, hint: Optional[str] = None) -> None:
    """Print an error message to stderr."""
    typer.echo(f"Error: {message}", err=True)
    if hint:
        typer.echo(f"Try: {hint}", err=True)


def fail(message: str, hint: Optional[str] = None) -> NoReturn:
    """Report an error and exit with the CLI error code."""
    print_error(message, hint)
    raise typer.Exit(code=CLIConfig.ERROR_EXIT_CODE)


def symbol_line(symbol: Symbol) -> str:
    return f"{symbol.kind}\t{symbol.display_name}\t{symbol.file_path}:{symbol.line}"


def symbols_payload(symbols: List[Symbol]) -> dict:
    return {
        "count": len(symbols),
        "symbols": [s.model_dump(mode="json") for s in symbols],
    }


def symbol_table(symbols: List[Symbol], title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("Kind", style="magenta")
    table.add_column("Name", style="bold")
    table.add_column("Class")
    table.add_column("Package", style="dim")
    table.add_column("Location", style="cyan")
    table.add_column("Signature")

    for symbol in symbols:
        table.add_row(
            str(symbol.kind),
            symbol.name,
            symbol.class_name or "",
            symbol.package_name or "",
            f"{symbol.file_path}:{symbol.line}",
            symbol.signature or "",
        )
    return table
