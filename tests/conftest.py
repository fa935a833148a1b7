"""
Root test configuration and fixtures.

Sets up environment variables BEFORE any app modules are imported,
to prevent import-time side effects (log file creation, config loading, etc.)
from writing to the user's real config directory.
"""
import os
import sys
import tempfile
import logging

# ---------------------------------------------------------------------------
# Environment setup (runs at import time, before any test module loads)
# ---------------------------------------------------------------------------
_TEST_CONFIG_DIR = tempfile.mkdtemp(prefix="xkcd_test_config_")
os.environ["CONFIG_DIR"] = _TEST_CONFIG_DIR

# Ensure the project root is on sys.path so imports work
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# ---------------------------------------------------------------------------
# Now we can safely import pytest (fixtures below)
# ---------------------------------------------------------------------------
import pytest


# ---------------------------------------------------------------------------
# Fixture: Temporary directories
# ---------------------------------------------------------------------------
@pytest.fixture
def tmp_image_dir(tmp_path):
    """Empty directory for downloaded images."""
    image_dir = tmp_path / "xkcd"
    image_dir.mkdir()
    return image_dir


# ---------------------------------------------------------------------------
# Fixture: Database
# ---------------------------------------------------------------------------
@pytest.fixture
def db_path(tmp_path):
    """Path to a temporary SQLite database file."""
    return str(tmp_path / "test_xkcd_downloader.db")


@pytest.fixture
def store(db_path):
    """A freshly initialized ComicStore, closed after the test."""
    from database import ComicStore

    comic_store = ComicStore.open(db_path)
    yield comic_store
    comic_store.close()


# ---------------------------------------------------------------------------
# Fixture: Logging suppression (autouse)
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _suppress_app_logging():
    """Redirect app_logger to a NullHandler to avoid file I/O in tests."""
    from app_logging import app_logger

    original_handlers = app_logger.handlers[:]
    app_logger.handlers = [logging.NullHandler()]
    yield
    app_logger.handlers = original_handlers
