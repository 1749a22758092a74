"""Delimited-text (CSV) importer for Notion database exports.

Notion exports are close to CSV but not reliably so: headers vary between
workspaces and rows occasionally lose a column. The importer reads what it
can and silently drops what it cannot.
"""

import logging
from typing import Callable, Optional

from ..db.schemas import Book
from .base import CandidateRecord
from .normalize import (
    coerce_date,
    map_format_vocabulary,
    map_status_vocabulary,
    parse_rating_notation,
)

logger = logging.getLogger(__name__)

DELIMITER = ","
QUOTE = '"'


def tokenize_row(line: str, delimiter: str = DELIMITER, quote: str = QUOTE) -> list[str]:
    """Split one line into fields, honouring quoted sections.

    A quote character toggles quoted mode and is dropped from the output;
    a delimiter inside quotes is kept as text.
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == quote:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def _set_cover(record: CandidateRecord, value: str) -> None:
    if value.startswith("http"):
        record.cover_url = value


def _setter(attr: str, convert: Callable[[str], object] = lambda v: v):
    def set_field(record: CandidateRecord, value: str) -> None:
        setattr(record, attr, convert(value))

    return set_field


# Lowercased header -> how its cell lands on the candidate
HEADER_FIELDS: dict[str, Callable[[CandidateRecord, str], None]] = {
    "title": _setter("title"),
    "name": _setter("title"),
    "author": _setter("author"),
    "authors": _setter("author"),
    "isbn": _setter("isbn"),
    "status": _setter("status", map_status_vocabulary),
    "format": _setter("format", map_format_vocabulary),
    "type": _setter("format", map_format_vocabulary),
    "rating": _setter("rating", parse_rating_notation),
    "score /5": _setter("rating", parse_rating_notation),
    "score": _setter("rating", parse_rating_notation),
    "notes": _setter("notes"),
    "notes/comments": _setter("notes"),
    "date added": _setter("date_added"),
    "dateadded": _setter("date_added"),
    "date started": _setter("date_started"),
    "datestarted": _setter("date_started"),
    "date finished": _setter("date_finished", coerce_date),
    "datefinished": _setter("date_finished", coerce_date),
    "finished": _setter("date_finished", coerce_date),
    "cover": _set_cover,
    "cover image": _set_cover,
    "coverimage": _set_cover,
}


def parse_row(headers: list[str], values: list[str]) -> Optional[CandidateRecord]:
    """Route a row's cells onto a candidate record.

    Returns:
        The candidate, or None if the row does not line up with the headers
    """
    if len(values) != len(headers):
        return None

    record = CandidateRecord()
    for header, raw in zip(headers, values):
        assign = HEADER_FIELDS.get(header)
        if assign is None:
            continue
        assign(record, raw.strip())

    return record


def import_delimited_text(text: str) -> list[Book]:
    """Parse a CSV export into books.

    The first non-blank line holds the headers. Rows whose field count does
    not match, and rows without both title and author, are skipped.

    Args:
        text: Whole file contents

    Returns:
        Books in input row order, each with a fresh id
    """
    lines = [line.rstrip("\r") for line in text.split("\n") if line.strip()]
    if len(lines) < 2:
        return []

    # Notion writes a byte-order mark ahead of the first header
    headers = [h.strip().lstrip("\ufeff").lower() for h in tokenize_row(lines[0])]
    books = []
    malformed = 0

    for line in lines[1:]:
        record = parse_row(headers, tokenize_row(line))
        if record is None:
            malformed += 1
            continue

        book = record.to_book()
        if book is not None:
            books.append(book)

    if malformed:
        logger.debug("Skipped %d rows with a mismatched field count", malformed)

    return books
