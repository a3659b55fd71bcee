"""
codeindex: extract symbols from source trees into a queryable SQLite index.
"""

__version__ = "0.1.0"

# Core exports
from codeindex.schemas import SearchRequest, Symbol, SymbolKind
from codeindex.storage import SQLiteStorage
from codeindex.parser import ParserRegistry, default_registry
from codeindex.indexer import CodeIndexer
from codeindex.export import export_symbols

__all__ = [
    "__version__",
    "CodeIndexer",
    "ParserRegistry",
    "SQLiteStorage",
    "SearchRequest",
    "Symbol",
    "SymbolKind",
    "default_registry",
    "export_symbols",
]
