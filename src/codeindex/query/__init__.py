"""
Public API for the query compiler.
"""
from .compiler import CompiledQuery, compile_request, like_pattern

__all__ = ["CompiledQuery", "compile_request", "like_pattern"]
