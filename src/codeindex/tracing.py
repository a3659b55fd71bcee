"""
Performance tracing decorator for the indexing and export entry points.
"""

import time
import functools
from typing import Callable, Any
from codeindex.logging_config import logger


def trace(func: Callable) -> Callable:
    """
    Decorator that logs function entry, exit, and execution time.

    Exceptions are logged with the elapsed time and re-raised unchanged.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__qualname__
        logger.debug(f"TRACE_ENTER: {func_name}")

        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"TRACE_EXIT: {func_name} failed after {duration:.4f}s with {type(e).__name__}: {e}"
            )
            raise

        duration = time.perf_counter() - start_time
        logger.info(f"TRACE_EXIT: {func_name} completed in {duration:.4f}s")
        return result

    return wrapper
