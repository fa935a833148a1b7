"""
Shared application logger.

Everything logs through ``app_logger``. Messages go to the console and to a
rotating file under ``<CONFIG_DIR>/logs``.
"""
import logging
import os
from logging.handlers import RotatingFileHandler

CONFIG_DIR = os.environ.get(
    'CONFIG_DIR',
    os.path.join(os.path.expanduser("~"), ".config", "xkcd_downloader")
)
LOG_DIR = os.path.join(CONFIG_DIR, "logs")
os.makedirs(LOG_DIR, exist_ok=True)
APP_LOG = os.path.join(LOG_DIR, "app.log")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

app_logger = logging.getLogger("app_logger")
app_logger.setLevel(logging.INFO)
app_logger.propagate = False

# Only add handlers if not already added (prevents duplicate handlers)
if not app_logger.handlers:
    _file_handler = RotatingFileHandler(APP_LOG, maxBytes=5 * 1024 * 1024, backupCount=3)
    _file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(_file_handler)

    _console_handler = logging.StreamHandler()
    _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(_console_handler)


def set_debug_logging(enabled):
    """Switch app_logger between DEBUG and INFO."""
    app_logger.setLevel(logging.DEBUG if enabled else logging.INFO)
