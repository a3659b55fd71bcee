# Custom exceptions for codeindex

class CodeIndexError(Exception):
    """Base exception for all application-specific errors."""
    pass

class ParserError(CodeIndexError):
    """Raised when a whole file cannot be read or parsed."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")

class IndexCorruptionError(CodeIndexError):
    """Raised if the index database cannot be opened or its schema created."""
    pass

class ConfigError(CodeIndexError):
    """Raised for configuration-related problems."""
    pass


class SymbolValidationError(CodeIndexError):
    """Raised when a batch contains a symbol missing a required field."""

    def __init__(self, index: int, field: str, symbol=None):
        self.index = index
        self.field = field
        self.symbol = symbol
        super().__init__(
            f"Symbol at batch position {index} is missing required field '{field}'"
        )


class InvalidRootError(CodeIndexError, ValueError):
    """Raised when a project root does not exist or is not a directory."""

    def __init__(self, root):
        self.root = root
        super().__init__(f"Invalid root path: {root}")
