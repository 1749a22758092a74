"""Markdown importer for Notion page exports.

Each book is a level-one heading followed by ``Label: value`` lines::

    # The Great Gatsby
    Author: F. Scott Fitzgerald
    Status: Finished
    Rating: 4.5
"""

from typing import Optional

from ..db.schemas import Book
from .base import CandidateRecord
from .normalize import map_format_vocabulary, map_status_vocabulary, parse_numeric_rating

HEADING_MARKER = "# "


def _apply_property(record: CandidateRecord, key: str, value: str) -> None:
    """Set a single ``key: value`` property on the open record."""
    if key in ("author", "authors"):
        record.author = value
    elif key == "status":
        record.status = map_status_vocabulary(value)
    elif key in ("format", "type"):
        record.format = map_format_vocabulary(value)
    elif key == "isbn":
        record.isbn = value
    elif key == "rating":
        # Page exports write plain numbers; star marks are a CSV-only notation
        record.rating = parse_numeric_rating(value)
    elif key == "notes":
        record.notes = value


def import_light_markup(text: str) -> list[Book]:
    """Parse a Markdown export into books.

    Blocks without an author (or properties before the first heading)
    are discarded.

    Args:
        text: Whole file contents

    Returns:
        Books in the order their headings appear, each with a fresh id
    """
    books = []
    current: Optional[CandidateRecord] = None

    def flush() -> None:
        if current is None:
            return
        book = current.to_book()
        if book is not None:
            books.append(book)

    for raw_line in text.split("\n"):
        line = raw_line.strip()

        if line.startswith(HEADING_MARKER):
            flush()
            current = CandidateRecord(title=line[len(HEADING_MARKER):].strip())
        elif ":" in line:
            key, _, value = line.partition(":")
            if current is None:
                current = CandidateRecord()
            _apply_property(current, key.strip().lower(), value.strip())

    flush()
    return books
