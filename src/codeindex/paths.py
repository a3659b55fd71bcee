"""
codeindex Path Configuration

Centralized path management for codeindex data files.
All paths are relative to the project root (current working directory).

Directory Structure:
.codeindex/
├── codeindex.db         # Default SQLite index
├── config.json          # Local configuration overrides
└── logs/                # Log files (opt-in)
"""

from pathlib import Path
from typing import Optional


class CodeIndexPaths:
    """
    Centralized path configuration for codeindex.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    DATA_DIR = ".codeindex"
    GLOBAL_DIR = Path.home() / ".codeindex"

    INDEX_DB_NAME = "codeindex.db"
    CONFIG_NAME = "config.json"
    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None):
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        return self._project_root or Path.cwd()

    @property
    def data_dir(self) -> Path:
        return self.project_root / self.DATA_DIR

    @property
    def index_db(self) -> Path:
        return self.data_dir / self.INDEX_DB_NAME

    @property
    def local_config(self) -> Path:
        return self.data_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        return self.GLOBAL_DIR / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create the data and log directories if missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


_paths: Optional[CodeIndexPaths] = None


def get_paths(project_root: Optional[Path] = None) -> CodeIndexPaths:
    """
    Get the paths configuration.

    A project_root always builds a fresh instance; without one the
    process-wide CWD-relative instance is reused.
    """
    global _paths
    if project_root is not None:
        return CodeIndexPaths(project_root)
    if _paths is None:
        _paths = CodeIndexPaths()
    return _paths
