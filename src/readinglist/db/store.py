"""SQLite record store.

Handles database connection, session management, and the CRUD contract used
by the import pipeline: list, replace-all, create, update-by-id, delete-by-id.
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base, BookRecord
from .schemas import Book, BookUpdate

logger = logging.getLogger(__name__)


class Database:
    """Database connection and record operations."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses the
                     configured READINGLIST_DB_PATH.
        """
        if db_path is None:
            from ..config import get_config

            db_path = str(get_config().db_path)

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        if self._is_memory:
            # All sessions must share the one in-memory connection
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all database tables."""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ========================================================================
    # Book Operations
    # ========================================================================

    def list_books(self) -> list[Book]:
        """Get all books in collection order."""
        with self.get_session() as s:
            stmt = select(BookRecord).order_by(BookRecord.position)
            return [row.to_book() for row in s.execute(stmt).scalars().all()]

    def get_book(self, book_id: str) -> Optional[Book]:
        """Get a book by ID."""
        with self.get_session() as s:
            row = s.get(BookRecord, book_id)
            return row.to_book() if row else None

    def replace_all(self, books: list[Book]) -> None:
        """Replace the whole collection with the given books."""
        with self.get_session() as s:
            s.execute(delete(BookRecord))
            for position, book in enumerate(books):
                row = BookRecord(position=position)
                row.apply(book)
                s.add(row)
        logger.info("Replaced collection with %d books", len(books))

    def create_book(self, book: Book) -> Book:
        """Append a new book to the collection."""
        with self.get_session() as s:
            last = s.execute(select(func.max(BookRecord.position))).scalar()
            row = BookRecord(position=0 if last is None else last + 1)
            row.apply(book)
            s.add(row)
            s.flush()
            return row.to_book()

    def update_book(self, book_id: str, update: BookUpdate) -> Optional[Book]:
        """Apply a partial update to a book.

        Returns:
            The updated book, or None if no book has this id
        """
        with self.get_session() as s:
            row = s.get(BookRecord, book_id)
            if not row:
                return None

            merged = row.to_book().model_copy(
                update=update.model_dump(exclude_unset=True)
            )
            # Re-validate so rating and required-field rules still hold
            row.apply(Book.model_validate(merged.model_dump()))
            s.flush()
            return row.to_book()

    def delete_book(self, book_id: str) -> bool:
        """Delete a book record."""
        with self.get_session() as s:
            row = s.get(BookRecord, book_id)
            if not row:
                return False
            s.delete(row)
            return True

    def count_books(self) -> int:
        """Number of books in the collection."""
        with self.get_session() as s:
            return s.execute(select(func.count(BookRecord.id))).scalar() or 0

    # ========================================================================
    # JSON interchange
    # ========================================================================

    def export_json(self, path: Path) -> int:
        """Write the collection as a camelCase JSON array.

        Returns:
            Number of books written
        """
        books = self.list_books()
        payload = [book.to_json_dict() for book in books]
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return len(books)

    def import_json(self, path: Path) -> int:
        """Replace the collection with the contents of a JSON export.

        Returns:
            Number of books loaded
        """
        data = json.loads(path.read_text(encoding="utf-8"))
        books = [Book.model_validate(item) for item in data]
        self.replace_all(books)
        return len(books)


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
