"""
Symbol index exporter.

Reads the whole index in source order and renders it as a Markdown report
or an XML document, grouped by file and then by enclosing class.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
from xml.sax.saxutils import escape

from codeindex.exceptions import ConfigError
from codeindex.logging_config import logger
from codeindex.schemas import Symbol, SymbolKind
from codeindex.storage import SQLiteStorage
from codeindex.tracing import trace
from .config import (
    EXPORT_FORMATS,
    MARKDOWN_TABLE_HEADER,
    MARKDOWN_TABLE_RULE,
    MARKDOWN_TITLE,
    TOP_LEVEL_GROUP,
    XML_DECLARATION,
    XML_INDENT,
)

XML_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}

Grouped = Dict[str, Dict[str, List[Symbol]]]


def _group(symbols: Iterable[Symbol]) -> Grouped:
    """file_path -> class group -> symbols, preserving first-seen order."""
    grouped: Grouped = {}
    for symbol in symbols:
        by_class = grouped.setdefault(symbol.file_path, {})
        by_class.setdefault(symbol.class_name or TOP_LEVEL_GROUP, []).append(symbol)
    return grouped


def _xml_attr(value: Optional[str]) -> str:
    return escape(value or "", XML_ATTR_ENTITIES)


def render_markdown(symbols: Iterable[Symbol]) -> str:
    lines = [MARKDOWN_TITLE, ""]
    for file_path, by_class in _group(symbols).items():
        lines.append(f"## File: {file_path}")
        lines.append("")
        for group, members in by_class.items():
            if group != TOP_LEVEL_GROUP:
                lines.append(f"### Class: {group}")
            lines.append(MARKDOWN_TABLE_HEADER)
            lines.append(MARKDOWN_TABLE_RULE)
            for symbol in members:
                signature = (symbol.signature or "").replace("|", "\\|")
                lines.append(f"| {symbol.kind} | {symbol.name} | {symbol.line} | `{signature}` |")
            lines.append("")
    return "\n".join(lines) + "\n"


def _xml_symbol(symbol: Symbol, depth: int) -> str:
    return (
        f'{XML_INDENT * depth}<symbol kind="{symbol.kind}" name="{_xml_attr(symbol.name)}" '
        f'line="{symbol.line}" signature="{_xml_attr(symbol.signature)}"/>'
    )


def render_xml(symbols: Iterable[Symbol]) -> str:
    lines = [XML_DECLARATION, "<project>"]
    for file_path, by_class in _group(symbols).items():
        lines.append(f'{XML_INDENT}<file path="{_xml_attr(file_path)}">')
        for group, members in by_class.items():
            if group == TOP_LEVEL_GROUP:
                lines.extend(_xml_symbol(s, 2) for s in members)
            else:
                lines.append(f'{XML_INDENT * 2}<class name="{_xml_attr(group)}">')
                lines.extend(_xml_symbol(s, 3) for s in members)
                lines.append(f"{XML_INDENT * 2}</class>")
        lines.append(f"{XML_INDENT}</file>")
    lines.append("</project>")
    return "\n".join(lines) + "\n"


RENDERERS = {
    "markdown": render_markdown,
    "xml": render_xml,
}


@trace
def export_symbols(
    db_path: Union[str, Path],
    output_file: Union[str, Path],
    fmt: str = "markdown",
    kinds: Optional[Iterable[SymbolKind]] = None,
) -> int:
    """
    Write the index to output_file.

    Args:
        db_path: Index database to read
        output_file: Destination file (overwritten)
        fmt: 'markdown' or 'xml', case-insensitive
        kinds: Optional set of kinds to include; None exports everything

    Returns:
        Number of symbols exported

    Raises:
        ConfigError: If fmt is not a supported format
    """
    fmt_key = (fmt or "").strip().lower()
    if fmt_key not in EXPORT_FORMATS:
        raise ConfigError(f"Unsupported export format '{fmt}'. Valid formats: {', '.join(EXPORT_FORMATS)}")

    with SQLiteStorage(db_path) as store:
        symbols = store.get_all(kinds)

    output_path = Path(output_file)
    output_path.write_text(RENDERERS[fmt_key](symbols), encoding="utf-8")
    logger.info(f"Exported {len(symbols)} symbols to '{output_path}' as {fmt_key}")
    return len(symbols)
