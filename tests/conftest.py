"""
Pytest configuration for the codeindex test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Common fixtures for temp directories, sample projects and stores
- Marker-based test organization
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from codeindex.logging_config import setup_logging


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep console logging out of test output."""
    os.environ.setdefault("CODEINDEX_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, enable_file_logging=False, force=True)


@pytest.fixture(autouse=True)
def isolated_user_config(monkeypatch, temp_dir):
    """Point the global config at an empty location and reset singletons."""
    from codeindex import user_config
    from codeindex.paths import CodeIndexPaths

    monkeypatch.setattr(CodeIndexPaths, "GLOBAL_DIR", temp_dir / "global_config")
    user_config.reset_user_config()
    yield
    user_config.reset_user_config()


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="codeindex_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_project(temp_dir):
    """
    Create a temporary project directory with sample Python files.

    Layout:
        project/app/__init__.py
        project/app/service.py   (class UserService with methods and fields)
        project/app/util.py      (module-level helpers)

    Returns:
        Path to the project root.
    """
    root = temp_dir / "project"
    package = root / "app"
    package.mkdir(parents=True)

    (package / "__init__.py").write_text("VERSION = '1.0'\n")

    (package / "service.py").write_text('''
from app.util import normalize


class UserService:
    """Looks up users."""

    cache_size = 10

    def __init__(self, repo):
        self.repo = repo

    def find_user(self, user_id):
        key = normalize(user_id)
        return self.lookup(key)

    def lookup(self, key):
        return self.repo.get(key)


def build_service(repo):
    return UserService(repo)
''')

    (package / "util.py").write_text('''
DEFAULT_SEPARATOR = "-"


def normalize(value):
    return str(value).strip()


def join_parts(parts):
    return DEFAULT_SEPARATOR.join(normalize(p) for p in parts)
''')

    yield root


# ============================================================================
# STORE FIXTURES
# ============================================================================

@pytest.fixture
def db_path(temp_dir):
    return temp_dir / "index.db"


@pytest.fixture
def store(db_path):
    """
    An initialized, empty SQLiteStorage that is closed after the test.
    """
    from codeindex.storage import SQLiteStorage

    storage = SQLiteStorage(db_path)
    yield storage
    storage.close()

