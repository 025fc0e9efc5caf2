# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os

# Settings are read at import time, so the test environment must be in place
# before anything imports inkblog.
os.environ["REDIS_ENABLED"] = "false"
os.environ["SEARCH_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["VIEW_COUNT_FLUSH_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-inkblog"
