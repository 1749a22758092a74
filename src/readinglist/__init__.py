"""readinglist: import, reconcile and track a Notion reading list."""

from .db.schemas import Book, BookFormat, BookMetadata, ReadingStatus
from .etl import are_same_book, merge_books, reconcile
from .imports import (
    coerce_date,
    import_delimited_text,
    import_light_markup,
    map_format_vocabulary,
    map_status_vocabulary,
    normalize_for_comparison,
    parse_numeric_rating,
    parse_rating_notation,
)

__version__ = "0.1.0"

__all__ = [
    "Book",
    "BookFormat",
    "BookMetadata",
    "ReadingStatus",
    "are_same_book",
    "coerce_date",
    "import_delimited_text",
    "import_light_markup",
    "map_format_vocabulary",
    "map_status_vocabulary",
    "merge_books",
    "normalize_for_comparison",
    "parse_numeric_rating",
    "parse_rating_notation",
    "reconcile",
]
