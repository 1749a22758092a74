"""API module for external book metadata services.

Provides catalog clients and the lookup used when importing or adding
books: Google Books first, Open Library as fallback.
"""

import logging
from typing import Optional, Sequence

from ..db.schemas import BookMetadata
from .base import CatalogClient, MetadataLookupError, RateLimitError
from .googlebooks import GoogleBooksClient
from .openlibrary import OpenLibraryClient, cover_url_for_isbn

logger = logging.getLogger(__name__)


def default_clients() -> list[CatalogClient]:
    """Clients in lookup order, configured from the environment."""
    from ..config import get_config

    config = get_config()
    return [
        GoogleBooksClient(api_key=config.google_books_api_key, timeout=config.lookup_timeout),
        OpenLibraryClient(timeout=config.lookup_timeout),
    ]


def get_book_metadata(
    title: str,
    author: Optional[str] = None,
    clients: Optional[Sequence[CatalogClient]] = None,
) -> BookMetadata:
    """Look up metadata for a book.

    Each client is tried in order; lookup errors are logged and the next
    client is tried. When nothing is found the result carries only the
    given title and author.

    Args:
        title: Book title
        author: Author name, narrows the search when given
        clients: Catalog clients to query (default: Google Books, Open Library)

    Returns:
        BookMetadata, possibly with no fields beyond title and author
    """
    query = f"{title} {author}" if author else title

    for client in clients if clients is not None else default_clients():
        try:
            result = client.search(query)
        except MetadataLookupError as e:
            logger.warning("Metadata lookup failed for %r: %s", query, e)
            continue
        if result is not None:
            return result

    logger.info("No catalog match for %r", query)
    return BookMetadata(title=title, author=author or "Unknown")


__all__ = [
    "CatalogClient",
    "GoogleBooksClient",
    "OpenLibraryClient",
    "MetadataLookupError",
    "RateLimitError",
    "cover_url_for_isbn",
    "default_clients",
    "get_book_metadata",
]
