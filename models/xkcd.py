"""
xkcd JSON API client.

xkcd publishes per-comic metadata as JSON:
- GET https://xkcd.com/info.0.json      - the latest comic
- GET https://xkcd.com/<num>/info.0.json - a specific comic

Only ``num`` and ``img`` matter to the downloader; the remaining fields are
kept on the Comic object for logging.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from app_logging import app_logger
from version import __version__

USER_AGENT = f"xkcd-downloader/{__version__}"


class XkcdApiError(Exception):
    """Raised when comic metadata cannot be fetched or parsed."""


@dataclass
class Comic:
    """Metadata for a single comic."""
    number: int
    image_url: str
    title: str = ""
    safe_title: str = ""
    alt: str = ""
    year: Optional[str] = None
    month: Optional[str] = None
    day: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Comic":
        """Build a Comic from an info.0.json payload."""
        return cls(
            number=int(data["num"]),
            image_url=data["img"],
            title=data.get("title", ""),
            safe_title=data.get("safe_title", ""),
            alt=data.get("alt", ""),
            year=data.get("year"),
            month=data.get("month"),
            day=data.get("day"),
        )


def is_connection_error(exc: Exception) -> bool:
    """Check if an XkcdApiError was caused by a connectivity/timeout problem."""
    return isinstance(exc, XkcdApiError) and isinstance(exc.__cause__, (
        requests.ConnectionError,
        requests.Timeout,
    ))


class XkcdClient:
    """Client for the xkcd JSON API."""

    def __init__(self, base_url="https://xkcd.com", timeout=None):
        """
        Initialize the client.

        Args:
            base_url: API root (e.g., https://xkcd.com)
            timeout: Seconds to wait per request; None uses the transport default
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': USER_AGENT,
        })

    def _get_comic(self, url: str) -> Comic:
        app_logger.debug(f"xkcd: GET {url}")
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise XkcdApiError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise XkcdApiError(f"Invalid JSON from {url}: {e}") from e

        try:
            return Comic.from_json(data)
        except (KeyError, TypeError, ValueError) as e:
            raise XkcdApiError(f"Unexpected comic payload from {url}: {e}") from e

    def latest(self) -> Comic:
        """Fetch the most recently published comic."""
        return self._get_comic(f"{self.base_url}/info.0.json")

    def get(self, comic_id: int) -> Comic:
        """Fetch metadata for a specific comic number."""
        return self._get_comic(f"{self.base_url}/{comic_id}/info.0.json")

    def close(self):
        self.session.close()
