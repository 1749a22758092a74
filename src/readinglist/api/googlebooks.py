"""Google Books API client.

Google Books has richer metadata than Open Library (descriptions, page
counts, categories) and is tried first. An API key is optional for low
request volumes.
"""

from typing import Optional

from ..db.schemas import BookMetadata
from .base import CatalogClient


class GoogleBooksClient(CatalogClient):
    """Client for the Google Books volumes API."""

    name = "Google Books"
    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(self, api_key: Optional[str] = None, timeout: int = 10):
        super().__init__(timeout=timeout)
        self.api_key = api_key

    def search(self, query: str) -> Optional[BookMetadata]:
        """Return the top volume for a query, or None."""
        params = {"q": query, "maxResults": 1}
        if self.api_key:
            params["key"] = self.api_key

        data = self._get(self.BASE_URL, params)
        items = data.get("items") or []
        if not items:
            return None
        return self._volume_to_metadata(items[0].get("volumeInfo") or {}, query)

    def _volume_to_metadata(self, volume: dict, query: str) -> BookMetadata:
        """Convert volumeInfo to BookMetadata."""
        isbn = None
        for identifier in volume.get("industryIdentifiers") or []:
            if identifier.get("type") in ("ISBN_13", "ISBN_10"):
                isbn = identifier.get("identifier")
                break

        images = volume.get("imageLinks") or {}
        authors = volume.get("authors") or []

        return BookMetadata(
            title=volume.get("title") or query,
            author=authors[0] if authors else "Unknown",
            isbn=isbn,
            cover_url=images.get("thumbnail") or images.get("smallThumbnail"),
            description=volume.get("description"),
            page_count=volume.get("pageCount"),
            published_date=volume.get("publishedDate"),
            genres=volume.get("categories"),
            rating=volume.get("averageRating"),
            review_url=volume.get("infoLink"),
        )
