"""
This facade exposes the public API for the parser module.
"""
from .java_parser import JavaParser
from .protocol import Parser
from .python_parser import PythonParser
from .registry import ParserRegistry, default_registry

__all__ = ["Parser", "PythonParser", "JavaParser", "ParserRegistry", "default_registry"]
