"""Shared HTTP plumbing for book catalog clients."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

import requests

from ..db.schemas import BookMetadata

logger = logging.getLogger(__name__)


class MetadataLookupError(Exception):
    """Base exception for catalog lookup errors."""

    pass


class RateLimitError(MetadataLookupError):
    """Raised when rate limited by a catalog."""

    pass


class CatalogClient(ABC):
    """Base client: one requests session, a timeout and polite pacing."""

    name = "catalog"

    def __init__(self, timeout: int = 10, min_request_interval: float = 0.5):
        """Initialize client.

        Args:
            timeout: Request timeout in seconds
            min_request_interval: Minimum seconds between requests
        """
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": "readinglist/0.1 (personal reading list)"
        })
        self._last_request_time = 0.0
        self._min_request_interval = min_request_interval

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
        self._last_request_time = time.time()

    def _get(self, url: str, params: Optional[dict] = None) -> dict:
        """Make GET request with error handling."""
        self._rate_limit()
        logger.debug("%s GET %s %s", self.name, url, params)
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout:
            raise MetadataLookupError(f"{self.name}: request timed out")
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 429:
                raise RateLimitError(f"Rate limited by {self.name}")
            status = e.response.status_code if e.response is not None else "?"
            raise MetadataLookupError(f"{self.name}: HTTP error {status}")
        except requests.exceptions.RequestException as e:
            raise MetadataLookupError(f"{self.name}: request failed: {e}")
        except ValueError as e:
            raise MetadataLookupError(f"{self.name}: invalid JSON response: {e}")

    @abstractmethod
    def search(self, query: str) -> Optional[BookMetadata]:
        """Look up the best match for a free-text query."""
        pass
