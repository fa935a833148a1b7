"""Plain HTTP image downloads."""
import os

import requests
from app_logging import app_logger

# Overrides the JSON Accept header set on API sessions
IMAGE_HEADERS = {"Accept": "*/*"}


class DownloadError(Exception):
    """Raised when an image cannot be fetched or written to disk."""


def file_exists(path) -> bool:
    """True when path exists and is not a directory."""
    return os.path.exists(path) and not os.path.isdir(path)


def download(url, local_path, session=None, timeout=None):
    """
    Download url into local_path, overwriting any existing file.

    The whole body is buffered in memory before writing. New files get the
    default 0o666 mode, reduced by the process umask.

    Args:
        url: Image URL
        local_path: Destination file path
        session: Optional requests.Session to reuse
        timeout: Seconds to wait; None uses the transport default

    Raises:
        DownloadError: on network, HTTP status, or file write failure
    """
    http = session or requests
    try:
        resp = http.get(url, headers=IMAGE_HEADERS, timeout=timeout)
        resp.raise_for_status()
        content = resp.content
    except requests.RequestException as e:
        raise DownloadError(f"Failed to fetch {url}: {e}") from e

    try:
        with open(local_path, "wb") as f:
            f.write(content)
    except OSError as e:
        raise DownloadError(f"Failed to write {local_path}: {e}") from e

    app_logger.debug(f"Wrote {len(content)} bytes to {local_path}")
