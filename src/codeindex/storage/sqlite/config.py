"""
SQLite Storage Configuration

Centralized configuration for the SQLite storage subsystem.
"""

# Transaction and batch settings
DEFAULT_CHUNK_SIZE = 1000
DEFAULT_BATCH_SIZE = 100

# Connection settings
DEFAULT_TIMEOUT = 30.0
ENABLE_WAL_MODE = True

# Open-time tuning: throughput over strict durability. WAL keeps the file
# consistent on crash; NORMAL sync may lose the last commits.
SYNCHRONOUS_MODE = "NORMAL"
CACHE_SIZE_KIB = 64000
TEMP_STORE = "MEMORY"

# Schema version
SCHEMA_VERSION = "1.0.0"
