# Log a progress line every N files during an indexing run
PROGRESS_LOG_INTERVAL = 100

# Maximum failures echoed individually in the run summary log
MAX_LOGGED_FAILURES = 20
