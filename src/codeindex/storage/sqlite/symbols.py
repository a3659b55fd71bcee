"""
SQLite Symbols Operations

Batch writes, compiled-query execution and ordered reads of the symbols table,
plus maintenance of its FTS5 shadow index.
"""

import sqlite3
from typing import Iterable, List, Optional, Sequence, Tuple

from codeindex.logging_config import logger
from codeindex.exceptions import SymbolValidationError
from codeindex.query import CompiledQuery
from codeindex.query.compiler import SELECT_SYMBOLS_SQL
from codeindex.schemas import Symbol, SymbolKind
from codeindex.storage.sqlite.config import DEFAULT_BATCH_SIZE, DEFAULT_CHUNK_SIZE
from codeindex.storage.sqlite.persistence import SQLitePersistence
from codeindex.storage.sqlite.schema import INSERT_SYMBOL_SQL

REQUIRED_FIELDS = ("name", "kind", "file_path", "line")


def symbol_to_row(symbol: Symbol) -> Tuple:
    """Column values in SYMBOL_COLUMNS order; kind stored by name."""
    return (
        symbol.name,
        symbol.class_name,
        symbol.package_name,
        SymbolKind(symbol.kind).name,
        symbol.file_path,
        symbol.line,
        symbol.signature,
        symbol.reference_to,
    )


def row_to_symbol(row: sqlite3.Row) -> Symbol:
    return Symbol(
        name=row["name"],
        kind=SymbolKind[row["kind"]],
        class_name=row["class_name"],
        package_name=row["package_name"],
        file_path=row["file_path"],
        line=row["line"],
        signature=row["signature"],
        reference_to=row["reference_to"],
    )


def validate_batch(symbols: Sequence[Symbol]) -> None:
    """
    Reject partial symbols before anything reaches the database.

    Symbols built through the model constructor are always complete; this
    catches instances built with ``model_construct`` or duck-typed records.
    """
    for index, symbol in enumerate(symbols):
        for field in REQUIRED_FIELDS:
            value = getattr(symbol, field, None)
            if value is None or value == "":
                raise SymbolValidationError(index, field, symbol)


def _kind_filter(kinds: Optional[Iterable[SymbolKind]]) -> Tuple[str, List[str]]:
    names = sorted({SymbolKind(k).name for k in kinds}) if kinds else []
    if not names:
        return "", []
    return f" WHERE kind IN ({', '.join('?' * len(names))})", names


class SQLiteSymbolsOperations:
    """
    Symbol read/write operations over the store's single connection.
    """

    def __init__(self, persistence: SQLitePersistence):
        self._persistence = persistence

    def save_symbols(self, symbols: Sequence[Symbol], chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """
        Insert a batch of symbols as one atomic transaction.

        Rows are flushed in chunks of ``chunk_size`` to bound statement size,
        but every chunk belongs to the same transaction: either the whole
        batch is visible afterwards or none of it is.

        Args:
            symbols: Symbols to insert
            chunk_size: Rows per executemany call

        Returns:
            Number of rows written

        Raises:
            SymbolValidationError: If a symbol lacks a required field
            sqlite3.Error: Any database failure, after rollback
        """
        if not symbols:
            return 0

        validate_batch(symbols)
        rows = [symbol_to_row(s) for s in symbols]
        total = len(rows)

        with self._persistence.transaction() as conn:
            for chunk_start in range(0, total, chunk_size):
                chunk_end = min(chunk_start + chunk_size, total)
                conn.executemany(INSERT_SYMBOL_SQL, rows[chunk_start:chunk_end])

                if total > chunk_size:
                    logger.debug(
                        f"Wrote symbol chunk {chunk_start // chunk_size + 1}/"
                        f"{(total + chunk_size - 1) // chunk_size} ({chunk_end}/{total})"
                    )

        logger.debug(f"Wrote {total} symbols total")
        return total

    def execute_query(self, compiled: CompiledQuery, batch_size: int = DEFAULT_BATCH_SIZE) -> List[Symbol]:
        """
        Run a compiled query and materialize its rows in result order.

        Rows are fetched in batches and the result never exceeds
        ``compiled.limit`` entries.
        """
        results: List[Symbol] = []
        cursor = self._persistence.connection.execute(compiled.sql, compiled.params)
        try:
            while len(results) < compiled.limit:
                rows = cursor.fetchmany(batch_size)
                if not rows:
                    break
                for row in rows:
                    results.append(row_to_symbol(row))
                    if len(results) >= compiled.limit:
                        break
        finally:
            cursor.close()
        return results

    def get_all(self, kinds: Optional[Iterable[SymbolKind]] = None) -> List[Symbol]:
        """
        Read the whole index back in source order: (file_path, line) ascending.

        Args:
            kinds: Optional set of kinds to keep; None or empty keeps all
        """
        where, params = _kind_filter(kinds)
        sql = f"{SELECT_SYMBOLS_SQL}{where} ORDER BY file_path, line, id"
        cursor = self._persistence.connection.execute(sql, params)
        try:
            return [row_to_symbol(row) for row in cursor]
        finally:
            cursor.close()

    def count_by_kind(self) -> dict:
        rows = self._persistence.connection.execute(
            "SELECT kind, COUNT(*) FROM symbols GROUP BY kind ORDER BY kind"
        ).fetchall()
        return {row[0]: row[1] for row in rows}

    def truncate(self) -> int:
        """
        Remove every symbol and clear the shadow index.

        Returns:
            Number of rows deleted
        """
        with self._persistence.transaction() as conn:
            deleted = conn.execute("DELETE FROM symbols").rowcount
            conn.execute("INSERT INTO symbols_fts(symbols_fts) VALUES('delete-all')")
        logger.info(f"Truncated index: removed {deleted} symbols")
        return deleted

    def verify_text_index(self) -> bool:
        """
        Check that the FTS5 shadow index mirrors the symbols table.

        Runs FTS5's internal integrity check and confirms every symbol row has
        a matching indexed document.
        """
        conn = self._persistence.connection
        try:
            conn.execute("INSERT INTO symbols_fts(symbols_fts) VALUES('integrity-check')")
        except sqlite3.DatabaseError as e:
            logger.warning(f"Text index integrity check failed: {e}")
            return False

        missing = conn.execute(
            "SELECT COUNT(*) FROM symbols WHERE id NOT IN (SELECT id FROM symbols_fts_docsize)"
        ).fetchone()[0]
        extra = conn.execute(
            "SELECT COUNT(*) FROM symbols_fts_docsize WHERE id NOT IN (SELECT id FROM symbols)"
        ).fetchone()[0]
        if missing or extra:
            logger.warning(f"Text index out of sync: {missing} rows missing, {extra} stale entries")
            return False
        return True

    def rebuild_text_index(self) -> None:
        """Repopulate the shadow index from the symbols table."""
        with self._persistence.transaction() as conn:
            conn.execute("INSERT INTO symbols_fts(symbols_fts) VALUES('rebuild')")
        logger.info("Rebuilt text index from symbols table")
