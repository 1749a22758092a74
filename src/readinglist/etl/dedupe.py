"""Deduplication logic for the reading list.

Identifies duplicate books using:
1. Normalized title + author equality
2. ISBN equality (catches differently transcribed titles)

Duplicates are folded into the first-seen record, which keeps its id and
takes fields from the later record according to per-field rules.
"""

from enum import Enum
from typing import Optional

from ..db.schemas import Book, BookFormat, BookMetadata, ReadingStatus
from ..imports.normalize import coerce_date, normalize_for_comparison


class MatchType(str, Enum):
    """Why two records were judged the same book."""

    TITLE_AUTHOR = "title_author"
    ISBN = "isbn"


# Higher rank survives a merge; abandoned sits below want-to-read
STATUS_RANK: dict[ReadingStatus, int] = {
    ReadingStatus.FINISHED: 4,
    ReadingStatus.CURRENTLY_READING: 3,
    ReadingStatus.WANT_TO_READ: 2,
    ReadingStatus.ABANDONED: 1,
}

NOTES_SEPARATOR = "\n\n---\n\n"

# Plain fields: survivor's value unless it has none. A catalog lookup
# fills the same fields.
FILL_FIELDS = [
    "isbn",
    "description",
    "cover_url",
    "page_count",
    "published_date",
    "genres",
    "review_url",
]


def identity_key(book: Book) -> str:
    """Provisional identity key: normalized title and author."""
    return f"{normalize_for_comparison(book.title)}|{normalize_for_comparison(book.author)}"


def match_books(a: Book, b: Book) -> Optional[MatchType]:
    """Check whether two records describe the same book.

    Returns:
        How they matched, or None if they are different books
    """
    if normalize_for_comparison(a.title) == normalize_for_comparison(b.title) and (
        normalize_for_comparison(a.author) == normalize_for_comparison(b.author)
    ):
        return MatchType.TITLE_AUTHOR

    if a.isbn and b.isbn and a.isbn == b.isbn:
        return MatchType.ISBN

    return None


def are_same_book(a: Book, b: Book) -> bool:
    """True if both records denote the same real-world book."""
    return match_books(a, b) is not None


# ============================================================================
# Field merge rules
# ============================================================================


def _absent(value) -> bool:
    return value is None or value == "" or value == []


def _first_present(kept, other):
    return other if _absent(kept) else kept


def most_advanced_status(kept: ReadingStatus, other: ReadingStatus) -> ReadingStatus:
    """The status further along in reading. Ties keep the first."""
    return other if STATUS_RANK[other] > STATUS_RANK[kept] else kept


def _known_format(kept: BookFormat, other: BookFormat) -> BookFormat:
    # "unknown" yields to any real format
    return other if kept == BookFormat.UNKNOWN else kept


def _date_key(value: str) -> str:
    # Compare parseable dates in ISO form, anything else as written
    return coerce_date(value) or value


def _earlier(a: Optional[str], b: Optional[str]) -> Optional[str]:
    if a and b:
        return a if _date_key(a) <= _date_key(b) else b
    return a or b


def _later(a: Optional[str], b: Optional[str]) -> Optional[str]:
    if a and b:
        return a if _date_key(a) >= _date_key(b) else b
    return a or b


def _higher(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is not None and b is not None:
        return max(a, b)
    return a if a is not None else b


def merge_notes(kept: Optional[str], other: Optional[str]) -> Optional[str]:
    """Join two notes, dropping exact repeats of either one."""
    if not kept:
        return other or None
    if not other:
        return kept

    sections = kept.split(NOTES_SEPARATOR)
    for section in other.split(NOTES_SEPARATOR):
        if section not in sections:
            sections.append(section)
    return NOTES_SEPARATOR.join(sections)


def merge_books(survivor: Book, incoming: Book) -> Book:
    """Fold a duplicate into the surviving record.

    The survivor keeps its id, title and author. Neither argument is
    modified; a new Book is returned.
    """
    update = {
        field: _first_present(getattr(survivor, field), getattr(incoming, field))
        for field in FILL_FIELDS
    }
    update.update(
        format=_known_format(survivor.format, incoming.format),
        status=most_advanced_status(survivor.status, incoming.status),
        date_added=_earlier(survivor.date_added, incoming.date_added),
        date_started=_earlier(survivor.date_started, incoming.date_started),
        date_finished=_later(survivor.date_finished, incoming.date_finished),
        rating=_higher(survivor.rating, incoming.rating),
        notes=merge_notes(survivor.notes, incoming.notes),
    )
    return survivor.model_copy(update=update, deep=True)


def apply_metadata(book: Book, metadata: Optional[BookMetadata]) -> Book:
    """Fill fields missing on a book from a catalog lookup result.

    Fields the book already has are never overwritten.
    """
    if metadata is None:
        return book

    update = {}
    for field in FILL_FIELDS:
        value = getattr(metadata, field)
        if _absent(getattr(book, field)) and not _absent(value):
            update[field] = value

    if not update:
        return book
    return book.model_copy(update=update, deep=True)


# ============================================================================
# Reconciliation
# ============================================================================


def _fold(survivors: dict[str, Book], book: Book) -> dict[str, Book]:
    """One reconciliation step: absorb the book or add it as a survivor."""
    for key, survivor in survivors.items():
        if are_same_book(survivor, book):
            folded = dict(survivors)
            folded[key] = merge_books(survivor, book)
            return folded

    folded = dict(survivors)
    folded[identity_key(book)] = book
    return folded


def _reconcile_pass(books: list[Book]) -> list[Book]:
    survivors: dict[str, Book] = {}
    for book in books:
        survivors = _fold(survivors, book)
    return list(survivors.values())


def reconcile(books: list[Book]) -> list[Book]:
    """Deduplicate books, merging every group of duplicates.

    Survivors come back in the order their identity was first seen.
    A merge can hand a survivor an ISBN that links it to an earlier
    survivor, so passes repeat until nothing more merges.

    Args:
        books: Records to reconcile; earlier records win ids

    Returns:
        New list of merged, unique records
    """
    result = _reconcile_pass(books)
    while True:
        again = _reconcile_pass(result)
        if len(again) == len(result):
            return result
        result = again


def count_duplicates(books: list[Book]) -> int:
    """Number of records reconciliation would absorb."""
    return len(books) - len(reconcile(books))
