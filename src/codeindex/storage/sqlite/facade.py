"""
SQLite Storage Facade

Public API for the symbol index. Delegates connection lifecycle to the
persistence layer and row operations to the symbols module.
"""

import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from codeindex.query import CompiledQuery, compile_request
from codeindex.schemas import IndexStats, SearchRequest, Symbol, SymbolKind
from codeindex.storage.sqlite.config import DEFAULT_CHUNK_SIZE
from codeindex.storage.sqlite.persistence import SQLitePersistence
from codeindex.storage.sqlite.symbols import SQLiteSymbolsOperations


class SQLiteStorage:
    """
    SQLite-backed symbol index.

    One connection per instance; every access goes through it. Use as a
    context manager so the connection is released on every exit path:

        with SQLiteStorage("index.db") as store:
            store.save_symbols(batch)

    Args:
        db_path: Path to the .db file (or a directory to hold codeindex.db)
        connection: Optional pre-built connection, mainly for tests
    """

    def __init__(self, db_path: Union[str, Path], connection: Optional[sqlite3.Connection] = None):
        self.persistence = SQLitePersistence(db_path, connection)
        self.symbols = SQLiteSymbolsOperations(self.persistence)
        self.db_path = self.persistence.db_path

    def __enter__(self) -> "SQLiteStorage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ========== LIFECYCLE ==========

    def initialize(self) -> None:
        """Create schema objects idempotently (already run on construction)."""
        self.persistence.initialize()

    @property
    def closed(self) -> bool:
        return self.persistence.is_closed

    def close(self) -> None:
        """Close the connection exactly once; later calls are no-ops."""
        self.persistence.close()

    # ========== WRITES ==========

    def save_symbols(self, symbols: Sequence[Symbol], chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """Insert a batch atomically. Returns the number of rows written."""
        return self.symbols.save_symbols(symbols, chunk_size)

    def truncate(self) -> int:
        """Delete every symbol, leaving an empty index."""
        return self.symbols.truncate()

    # ========== READS ==========

    def execute_query(self, compiled: CompiledQuery) -> List[Symbol]:
        """Run a compiled query, capped at its limit."""
        return self.symbols.execute_query(compiled)

    def search(self, request: Union[SearchRequest, str], limit: Optional[int] = None) -> List[Symbol]:
        """
        Compile and run a search.

        A plain string is treated as the free-text query of a request.
        """
        if isinstance(request, str):
            request = SearchRequest.build(query=request, limit=limit)
        elif limit is not None:
            request = request.model_copy(update={"limit": limit})
        return self.execute_query(compile_request(request))

    def get_all(self, kinds: Optional[Iterable[SymbolKind]] = None) -> List[Symbol]:
        """All symbols ordered by (file_path, line)."""
        return self.symbols.get_all(kinds)

    # ========== TEXT INDEX ==========

    def verify_text_index(self) -> bool:
        return self.symbols.verify_text_index()

    def rebuild_text_index(self) -> None:
        self.symbols.rebuild_text_index()

    # ========== METADATA & STATS ==========

    def get_metadata(self, key: str) -> Optional[str]:
        return self.persistence.get_metadata(key)

    def set_metadata(self, key: str, value: str) -> None:
        self.persistence.set_metadata(key, value)

    def get_stats(self) -> IndexStats:
        """Get index statistics."""
        counts = self.persistence.get_table_counts()
        return IndexStats(
            total_symbols=counts["total_symbols"],
            total_files=counts["total_files"],
            symbol_kinds=self.symbols.count_by_kind(),
            db_size_bytes=self.persistence.get_db_size(),
            schema_version=self.get_metadata("schema_version"),
        )
