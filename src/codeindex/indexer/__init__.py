"""
This facade exposes the public API for the indexer module.
"""
from .facade import CodeIndexer, normalize_symbol_path

__all__ = ["CodeIndexer", "normalize_symbol_path"]
