"""
This facade exposes the public API for the scanner module.
Other parts of the application should only import from here.
"""
from .facade import crawl, load_ignore_spec

__all__ = ["crawl", "load_ignore_spec"]
