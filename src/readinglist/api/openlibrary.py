"""Open Library API client for book metadata lookup.

Open Library (openlibrary.org) provides free book metadata: search by
title/author and cover images. Search results carry no descriptions.

No API key required.
"""

from typing import Optional

from ..db.schemas import BookMetadata
from .base import CatalogClient

COVERS_URL = "https://covers.openlibrary.org"


def cover_url_for_isbn(isbn: str) -> str:
    """Open Library cover image URL for an ISBN."""
    isbn = isbn.replace("-", "").replace(" ", "")
    return f"{COVERS_URL}/b/isbn/{isbn}-L.jpg"


class OpenLibraryClient(CatalogClient):
    """Client for the Open Library search API."""

    name = "Open Library"
    BASE_URL = "https://openlibrary.org"

    def search(self, query: str) -> Optional[BookMetadata]:
        """Return the top search hit for a query, or None."""
        params = {
            "q": query,
            "limit": 1,
            "fields": "key,title,author_name,first_publish_year,isbn,cover_i,number_of_pages_median,subject",
        }
        data = self._get(f"{self.BASE_URL}/search.json", params)

        docs = data.get("docs") or []
        if not docs:
            return None
        return self._doc_to_metadata(docs[0], query)

    def _doc_to_metadata(self, doc: dict, query: str) -> BookMetadata:
        """Convert search document to BookMetadata."""
        authors = doc.get("author_name") or []
        isbns = doc.get("isbn") or []

        cover_id = doc.get("cover_i")
        cover_url = f"{COVERS_URL}/b/id/{cover_id}-L.jpg" if cover_id else None

        year = doc.get("first_publish_year")
        subjects = (doc.get("subject") or [])[:5]

        return BookMetadata(
            title=doc.get("title") or query,
            author=authors[0] if authors else "Unknown",
            isbn=isbns[0] if isbns else None,
            cover_url=cover_url,
            page_count=doc.get("number_of_pages_median"),
            published_date=str(year) if year else None,
            genres=subjects or None,
        )
