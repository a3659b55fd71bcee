"""
CLI Configuration

Centralized configuration for the codeindex CLI subsystem.
"""


class CLIConfig:
    """Configuration for CLI commands"""

    # Separator accepted between kinds in --kinds
    KIND_SEPARATOR = ","

    # Console log level when --verbose is given
    VERBOSE_LOG_LEVEL = "DEBUG"

    # Exit code for any reported failure
    ERROR_EXIT_CODE = 1

