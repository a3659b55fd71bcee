"""
Storage layer for the codeindex symbol index.
"""

from .sqlite import SQLiteStorage

__all__ = [
    "SQLiteStorage",
]
