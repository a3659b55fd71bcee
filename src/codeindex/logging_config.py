import sys
import os
from loguru import logger

# Flag to track if logging has been configured
_logging_configured = False

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    Configures the global logger.

    By default, only console logging is enabled. File logging is opt-in via
    CODEINDEX_FILE_LOGGING=1 environment variable or enable_file_logging=True.

    Args:
        level: Logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check CODEINDEX_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check CODEINDEX_FILE_LOGGING env var.
        force: Reconfigure even if logging was already set up (used by the CLI --verbose flag).
    """
    global _logging_configured

    # Only configure once to avoid duplicate handlers
    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = _env_flag("CODEINDEX_MACHINE_MODE")

    # Stream 1: human-readable console output
    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format=CONSOLE_FORMAT,
            colorize=True
        )

    # Stream 2: file logging is opt-in
    if enable_file_logging is None:
        enable_file_logging = _env_flag("CODEINDEX_FILE_LOGGING")

    if enable_file_logging:
        from codeindex.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.logs_dir / "codeindex.log",
            level="INFO",
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
            serialize=False
        )


# Configure the logger on import (will check env var for machine mode)
setup_logging()
