"""
SQLite Schema Definitions

Contains the symbols table, its secondary indices, the FTS5 shadow index,
its insert trigger, and schema initialization logic.
"""

import sqlite3
from codeindex.logging_config import logger
from codeindex.schemas import SYMBOL_COLUMNS
from codeindex.storage.sqlite.config import SCHEMA_VERSION

SCHEMA_SQL = f"""
-- Symbols table (append-only; no foreign keys, reference_to is a weak link)
CREATE TABLE IF NOT EXISTS symbols (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    class_name TEXT,
    package_name TEXT,
    kind TEXT NOT NULL,
    file_path TEXT NOT NULL,
    line INTEGER NOT NULL,
    signature TEXT,
    reference_to TEXT
);

CREATE INDEX IF NOT EXISTS idx_symbols_name ON symbols(name);
CREATE INDEX IF NOT EXISTS idx_symbols_class_name ON symbols(class_name);
CREATE INDEX IF NOT EXISTS idx_symbols_package_name ON symbols(package_name);
CREATE INDEX IF NOT EXISTS idx_symbols_reference_to ON symbols(reference_to);

-- FTS5 shadow index over the searchable text columns
CREATE VIRTUAL TABLE IF NOT EXISTS symbols_fts USING fts5(
    name,
    class_name,
    package_name,
    content='symbols',
    content_rowid='id'
);

-- Every row written through INSERT is mirrored into the shadow index
CREATE TRIGGER IF NOT EXISTS symbols_ai AFTER INSERT ON symbols BEGIN
    INSERT INTO symbols_fts(rowid, name, class_name, package_name)
    VALUES (new.id, new.name, new.class_name, new.package_name);
END;

-- Metadata table
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

INSERT OR IGNORE INTO metadata (key, value) VALUES ('schema_version', '{SCHEMA_VERSION}');
INSERT OR IGNORE INTO metadata (key, value) VALUES ('created_at', strftime('%s', 'now'));
"""

INSERT_SYMBOL_SQL = (
    f"INSERT INTO symbols ({', '.join(SYMBOL_COLUMNS)}) "
    f"VALUES ({', '.join('?' * len(SYMBOL_COLUMNS))})"
)


def init_schema(conn: sqlite3.Connection, db_path: str) -> None:
    """
    Create schema objects if they do not exist yet.

    Safe to run against an existing index: every statement is IF NOT EXISTS
    or OR IGNORE. Errors propagate to the caller.

    Args:
        conn: SQLite connection
        db_path: Path to database file (for logging)
    """
    conn.executescript(SCHEMA_SQL)
    logger.debug(f"Initialized SQLite schema at {db_path}")
