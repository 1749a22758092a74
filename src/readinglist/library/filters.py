"""Filtering for reading-list views."""

from typing import Optional, Union

from ..db.schemas import Book, BookFormat, ReadingStatus

RATED = "rated"
UNRATED = "unrated"


def filter_books(
    books: list[Book],
    status: Optional[ReadingStatus] = None,
    format: Optional[BookFormat] = None,
    rating: Optional[Union[str, float]] = None,
    query: Optional[str] = None,
) -> list[Book]:
    """Narrow a list of books. Filters combine; None means no filter.

    Args:
        books: Books to filter, order is kept
        status: Only books with this status
        format: Only books in this format
        rating: "rated", "unrated", or an exact rating
        query: Case-insensitive substring of title or author

    Returns:
        Matching books
    """
    result = books

    if status is not None:
        result = [b for b in result if b.status == status]

    if format is not None:
        result = [b for b in result if b.format == format]

    if rating == UNRATED:
        result = [b for b in result if not b.rating]
    elif rating == RATED:
        result = [b for b in result if b.rating]
    elif rating is not None:
        result = [b for b in result if b.rating == float(rating)]

    if query and query.strip():
        needle = query.strip().lower()
        result = [
            b for b in result
            if needle in b.title.lower() or needle in b.author.lower()
        ]

    return list(result)
