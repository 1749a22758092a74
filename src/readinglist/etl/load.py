"""Import orchestration: parse exports, enrich, reconcile and store.

The parsers and the reconciliation engine are pure; this module is where
files are read, catalogs are queried and the record store is written.
Store failures are logged and the step is skipped.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from tqdm import tqdm

from ..api import MetadataLookupError, get_book_metadata
from ..db.schemas import Book, BookFormat, BookMetadata, BookUpdate, ReadingStatus
from ..db.store import Database, get_db
from ..imports import generate_id, import_delimited_text, import_light_markup
from .dedupe import apply_metadata, reconcile

logger = logging.getLogger(__name__)

Lookup = Callable[[str, Optional[str]], Optional[BookMetadata]]

CSV_SUFFIXES = {".csv"}
MARKDOWN_SUFFIXES = {".md", ".markdown"}
ENCODINGS = ["utf-8-sig", "cp1252"]


@dataclass
class ImportResult:
    """Result of an import operation."""

    parsed: int = 0
    duplicates_removed: int = 0
    total: int = 0
    skipped_files: list[Path] = field(default_factory=list)
    books: list[Book] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        """Get summary string."""
        return (
            f"Parsed: {self.parsed}, "
            f"Duplicates removed: {self.duplicates_removed}, "
            f"Total: {self.total}"
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def import_text(text: str, kind: str) -> list[Book]:
    """Parse export text.

    Args:
        text: File contents
        kind: "csv" or "markdown"
    """
    if kind == "csv":
        return import_delimited_text(text)
    if kind == "markdown":
        return import_light_markup(text)
    raise ValueError(f"Unknown export kind: {kind}")


def _kind_for(path: Path) -> Optional[str]:
    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        return "csv"
    if suffix in MARKDOWN_SUFFIXES:
        return "markdown"
    return None


def _read_export(path: Path) -> str:
    """Read an export, trying each encoding in turn.

    utf-8-sig also reads plain UTF-8 and drops a byte-order mark. latin-1
    decodes any byte, so it is the last resort.
    """
    data = path.read_bytes()
    for encoding in ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    logger.warning("%s is neither UTF-8 nor cp1252; reading as latin-1", path)
    return data.decode("latin-1")


def enrich_books(
    books: list[Book],
    lookup: Lookup,
    show_progress: bool = False,
) -> list[Book]:
    """Fill missing metadata for books without a cover.

    Lookup failures leave the book unchanged.
    """
    enriched = []
    for book in tqdm(books, desc="Fetching metadata", disable=not show_progress):
        if book.cover_url:
            enriched.append(book)
            continue
        try:
            metadata = lookup(book.title, book.author)
        except MetadataLookupError as e:
            logger.warning("Metadata lookup failed for %r: %s", book.title, e)
            metadata = None
        enriched.append(apply_metadata(book, metadata))
    return enriched


def import_files(
    paths: list[Path],
    db: Optional[Database] = None,
    enrich: bool = False,
    lookup: Lookup = get_book_metadata,
    show_progress: bool = False,
    dry_run: bool = False,
) -> ImportResult:
    """Import Notion exports and merge them into the stored reading list.

    Stored books come first, so they keep their ids when an import
    duplicates them.

    Args:
        paths: .csv and .md files; other files are skipped
        db: Database instance (uses global if not provided)
        enrich: Look up metadata for imported books without a cover
        lookup: Metadata lookup (default: Google Books, then Open Library)
        show_progress: Show tqdm progress bar while enriching
        dry_run: Reconcile but do not write

    Returns:
        ImportResult with counts and the reconciled collection
    """
    if db is None:
        db = get_db()

    result = ImportResult()
    imported: list[Book] = []

    for path in paths:
        kind = _kind_for(path)
        if kind is None:
            logger.warning("Skipping %s: not a CSV or Markdown export", path)
            result.skipped_files.append(path)
            continue
        try:
            text = _read_export(path)
        except OSError as e:
            logger.error("Could not read %s: %s", path, e)
            result.errors.append(f"Could not read {path}: {e}")
            continue
        books = import_text(text, kind)
        logger.info("Parsed %d books from %s", len(books), path)
        imported.extend(books)

    result.parsed = len(imported)

    if enrich and imported:
        imported = enrich_books(imported, lookup, show_progress=show_progress)

    try:
        existing = db.list_books()
    except SQLAlchemyError as e:
        logger.error("Could not read stored books: %s", e)
        result.errors.append(f"Could not read stored books: {e}")
        return result

    combined = existing + imported
    result.books = reconcile(combined)
    result.total = len(result.books)
    result.duplicates_removed = len(combined) - result.total

    if dry_run:
        return result

    try:
        db.replace_all(result.books)
    except SQLAlchemyError as e:
        logger.error("Could not save imported books: %s", e)
        result.errors.append(f"Could not save imported books: {e}")

    return result


def add_book(
    title: str,
    author: str,
    db: Optional[Database] = None,
    status: ReadingStatus = ReadingStatus.WANT_TO_READ,
    format: Optional[BookFormat] = None,
    lookup: Optional[Lookup] = None,
) -> Optional[Book]:
    """Add a book by hand, optionally filling metadata from a catalog.

    Returns:
        The stored book, or None if the store write failed
    """
    if db is None:
        db = get_db()

    book = Book(
        id=generate_id(),
        title=title.strip(),
        author=author.strip(),
        status=status,
        format=format,
        date_added=_now(),
    )
    if lookup is not None:
        try:
            book = apply_metadata(book, lookup(book.title, book.author))
        except MetadataLookupError as e:
            logger.warning("Metadata lookup failed for %r: %s", book.title, e)

    try:
        return db.create_book(book)
    except SQLAlchemyError as e:
        logger.error("Could not add %r: %s", book.title, e)
        return None


def update_status(
    book_id: str,
    status: ReadingStatus,
    db: Optional[Database] = None,
) -> Optional[Book]:
    """Change a book's status, stamping start/finish dates when first reached.

    Returns:
        The updated book, or None if it does not exist or the write failed
    """
    if db is None:
        db = get_db()

    try:
        book = db.get_book(book_id)
        if book is None:
            return None

        changes = {"status": status}
        if status == ReadingStatus.CURRENTLY_READING and not book.date_started:
            changes["date_started"] = _now()
        if status == ReadingStatus.FINISHED and not book.date_finished:
            changes["date_finished"] = _now()

        return db.update_book(book_id, BookUpdate(**changes))
    except SQLAlchemyError as e:
        logger.error("Could not update status of %s: %s", book_id, e)
        return None


def update_rating(
    book_id: str,
    rating: Optional[float],
    db: Optional[Database] = None,
) -> Optional[Book]:
    """Set or clear (rating=None) a book's rating."""
    if db is None:
        db = get_db()

    try:
        return db.update_book(book_id, BookUpdate(rating=rating))
    except SQLAlchemyError as e:
        logger.error("Could not update rating of %s: %s", book_id, e)
        return None


def remove_duplicates(db: Optional[Database] = None, dry_run: bool = False) -> int:
    """Reconcile the stored reading list in place.

    Returns:
        Number of records merged away
    """
    if db is None:
        db = get_db()

    try:
        books = db.list_books()
    except SQLAlchemyError as e:
        logger.error("Could not read stored books: %s", e)
        return 0

    unique = reconcile(books)
    removed = len(books) - len(unique)

    if removed and not dry_run:
        try:
            db.replace_all(unique)
        except SQLAlchemyError as e:
            logger.error("Could not save deduplicated books: %s", e)
            return 0

    return removed
