"""
SQLite Persistence Layer

Handles connection management, transactions, metadata, and database lifecycle.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Union

from codeindex.logging_config import logger
from codeindex.exceptions import IndexCorruptionError
from codeindex.paths import CodeIndexPaths
from codeindex.storage.sqlite.schema import init_schema
from codeindex.storage.sqlite.config import (
    CACHE_SIZE_KIB,
    DEFAULT_TIMEOUT,
    ENABLE_WAL_MODE,
    SYNCHRONOUS_MODE,
    TEMP_STORE,
)


class SQLitePersistence:
    """
    Owns the single SQLite connection of a store instance.

    Responsibilities:
    - Connection creation and tuning
    - Schema initialization (closing the connection if it fails)
    - Transaction management
    - Metadata storage
    """

    def __init__(self, db_path: Union[str, Path], connection: Optional[sqlite3.Connection] = None):
        """
        Open the database and initialize its schema.

        Args:
            db_path: Path to the .db file, or to an existing directory
                     (codeindex.db is created inside it)
            connection: Pre-built connection to use instead of opening one
        """
        db_path = Path(db_path)
        if db_path.is_dir():
            db_path = db_path / CodeIndexPaths.INDEX_DB_NAME
        self.db_path = db_path

        if connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            connection = self._open_connection()
        self._conn: Optional[sqlite3.Connection] = connection

        self.initialize()

    def _open_connection(self) -> sqlite3.Connection:
        """
        Create a connection in autocommit mode with the write-throughput pragmas.
        """
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=DEFAULT_TIMEOUT, isolation_level=None)
        except sqlite3.Error as e:
            raise IndexCorruptionError(f"Failed to open index at {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row  # Access columns by name
        try:
            if ENABLE_WAL_MODE:
                conn.execute("PRAGMA journal_mode = WAL")
            conn.execute(f"PRAGMA synchronous = {SYNCHRONOUS_MODE}")
            conn.execute(f"PRAGMA cache_size = -{CACHE_SIZE_KIB}")
            conn.execute(f"PRAGMA temp_store = {TEMP_STORE}")
            conn.execute(f"PRAGMA busy_timeout = {int(DEFAULT_TIMEOUT * 1000)}")
        except sqlite3.Error as e:
            conn.close()
            raise IndexCorruptionError(f"Failed to configure index at {self.db_path}: {e}") from e
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise IndexCorruptionError(f"Index store {self.db_path} is closed")
        return self._conn

    @property
    def is_closed(self) -> bool:
        return self._conn is None

    def initialize(self) -> None:
        """
        Create schema objects idempotently.

        Raises:
            IndexCorruptionError: If schema creation fails. The connection is
                closed first so no handle is left dangling.
        """
        try:
            init_schema(self.connection, str(self.db_path))
        except sqlite3.Error as e:
            error = IndexCorruptionError(f"Failed to initialize database schema: {e}")
            try:
                self.close()
            except sqlite3.Error as close_error:
                error.add_note(f"Closing the connection also failed: {close_error}")
            raise error from e

    @contextmanager
    def transaction(self):
        """
        Context manager for one atomic write.

        Turns autocommit off, commits on success, rolls back on any exception
        (including KeyboardInterrupt and SystemExit) and restores autocommit
        afterwards. Restoring autocommit would commit a still-open
        transaction, so one that cannot be rolled back is discarded by
        closing the connection instead.

        Usage:
            with persistence.transaction() as conn:
                conn.executemany(...)

        Yields:
            The store's connection
        """
        conn = self.connection
        conn.isolation_level = "DEFERRED"
        try:
            conn.execute("BEGIN")
            yield conn
            conn.commit()
            logger.debug("Transaction committed successfully")
        except BaseException as e:
            self._rollback(conn, e)
            raise
        finally:
            self._restore_autocommit(conn)

    def _restore_autocommit(self, conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            try:
                conn.rollback()
            except sqlite3.Error as e:
                logger.error(f"Discarding open transaction on {self.db_path} by closing the connection: {e}")
                self._discard(conn)
                return
        try:
            conn.isolation_level = None
        except sqlite3.Error as e:
            logger.error(f"Error restoring autocommit on {self.db_path}: {e}")

    def _discard(self, conn: sqlite3.Connection) -> None:
        # Closing without a commit drops the pending writes
        self._conn = None
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error closing {self.db_path}: {e}")

    @staticmethod
    def _rollback(conn: sqlite3.Connection, error: BaseException) -> None:
        """Roll back, attaching any rollback failure to the original error."""
        try:
            conn.rollback()
            logger.error(f"Transaction rolled back due to error: {error}")
        except sqlite3.Error as rollback_error:
            logger.error(f"Rollback failed after {error!r}: {rollback_error}")
            error.add_note(f"Rollback failed: {rollback_error!r}")
            error.rollback_error = rollback_error

    def get_metadata(self, key: str) -> Optional[str]:
        """Get metadata value by key."""
        row = self.connection.execute(
            "SELECT value FROM metadata WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set_metadata(self, key: str, value: str) -> None:
        """Set metadata key-value pair."""
        self.connection.execute(
            """
            INSERT INTO metadata (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )

    def get_db_size(self) -> int:
        """Size on disk, including a WAL file not yet checkpointed."""
        total = 0
        for path in (self.db_path, self.db_path.with_name(self.db_path.name + "-wal")):
            if path.exists():
                total += path.stat().st_size
        return total

    def get_table_counts(self) -> Dict[str, Any]:
        """Row counts used by the stats command."""
        conn = self.connection
        return {
            "total_symbols": conn.execute("SELECT COUNT(*) FROM symbols").fetchone()[0],
            "total_files": conn.execute("SELECT COUNT(DISTINCT file_path) FROM symbols").fetchone()[0],
        }

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        conn.close()
        logger.debug(f"Closed index store {self.db_path}")
