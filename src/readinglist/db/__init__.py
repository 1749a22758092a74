"""Database module for local SQLite storage."""

from .models import BookRecord
from .schemas import Book, BookFormat, BookMetadata, BookUpdate, ReadingStatus
from .store import Database, get_db, reset_db

__all__ = [
    "BookRecord",
    "Book",
    "BookFormat",
    "BookMetadata",
    "BookUpdate",
    "ReadingStatus",
    "Database",
    "get_db",
    "reset_db",
]
