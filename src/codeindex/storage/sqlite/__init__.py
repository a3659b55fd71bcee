"""
SQLite Storage Package

Public API:
- SQLiteStorage: Main facade for storage operations

Internal Modules:
- schema: Table, index, FTS5 shadow index and trigger definitions
- persistence: Connection management, transactions, metadata
- symbols: Symbol batch writes, query execution, ordered reads
- config: Configuration constants
"""

from codeindex.storage.sqlite.facade import SQLiteStorage

__all__ = ['SQLiteStorage']
