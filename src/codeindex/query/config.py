"""
Query Compiler Configuration
"""

# Hard LIMIT applied when a request does not set one
DEFAULT_LIMIT = 1000

# Separates the container term from the symbol term, e.g. "Outer::inner"
CONTAINER_SEPARATOR = "::"

# Escape character used in LIKE patterns so user text matches literally
LIKE_ESCAPE = "\\"
