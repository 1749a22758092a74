"""SQLAlchemy ORM models for the local SQLite record store.

Tables:
- books: reading-list entries, ordered by ``position``
"""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .schemas import Book, ReadingStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BookRecord(Base):
    """Book row - one reading-list entry."""

    __tablename__ = "books"

    # Primary key is the opaque id assigned at creation
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Collection order
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Core fields
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ReadingStatus.WANT_TO_READ.value, index=True
    )
    format: Mapped[Optional[str]] = mapped_column(String(20))
    rating: Mapped[Optional[float]] = mapped_column(Float)
    isbn: Mapped[Optional[str]] = mapped_column(String(32), index=True)

    # Dates (stored as text, imports may carry free-form values)
    date_added: Mapped[Optional[str]] = mapped_column(String(40))
    date_started: Mapped[Optional[str]] = mapped_column(String(40))
    date_finished: Mapped[Optional[str]] = mapped_column(String(40))

    # Metadata
    notes: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    cover_url: Mapped[Optional[str]] = mapped_column(Text)
    page_count: Mapped[Optional[int]] = mapped_column(Integer)
    published_date: Mapped[Optional[str]] = mapped_column(String(40))
    genres: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    review_url: Mapped[Optional[str]] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(40), default=_now)
    updated_at: Mapped[str] = mapped_column(String(40), default=_now, onupdate=_now)

    def __repr__(self) -> str:
        return f"<BookRecord(id={self.id!r}, title={self.title!r})>"

    def get_genres(self) -> Optional[list[str]]:
        """Get genres as list."""
        if self.genres:
            return json.loads(self.genres)
        return None

    def set_genres(self, genres: Optional[list[str]]) -> None:
        """Set genres from list."""
        self.genres = json.dumps(genres) if genres is not None else None

    def apply(self, book: Book) -> None:
        """Copy every field of a Book onto this row."""
        data = book.model_dump(mode="json")
        genres = data.pop("genres")
        for field, value in data.items():
            setattr(self, field, value)
        self.set_genres(genres)

    def to_book(self) -> Book:
        """Convert row to a Book schema."""
        return Book(
            id=self.id,
            title=self.title,
            author=self.author,
            status=self.status,
            format=self.format,
            rating=self.rating,
            isbn=self.isbn,
            date_added=self.date_added,
            date_started=self.date_started,
            date_finished=self.date_finished,
            notes=self.notes,
            description=self.description,
            cover_url=self.cover_url,
            page_count=self.page_count,
            published_date=self.published_date,
            genres=self.get_genres(),
            review_url=self.review_url,
        )
