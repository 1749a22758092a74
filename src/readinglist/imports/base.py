"""Candidate records built up while an export is being parsed."""

from dataclasses import dataclass
from typing import Optional

from ..db.schemas import Book, BookFormat, ReadingStatus
from .normalize import generate_id


@dataclass
class CandidateRecord:
    """A partially populated book, not yet guaranteed to have title and author."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    status: Optional[ReadingStatus] = None
    format: Optional[BookFormat] = None
    rating: Optional[float] = None
    notes: Optional[str] = None
    date_added: Optional[str] = None
    date_started: Optional[str] = None
    date_finished: Optional[str] = None
    cover_url: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """Whether both title and author are non-empty."""
        return bool((self.title or "").strip() and (self.author or "").strip())

    def to_book(self) -> Optional[Book]:
        """Promote to a Book with a fresh id.

        Returns:
            The Book, or None if title or author is missing
        """
        if not self.is_complete:
            return None

        return Book(
            id=generate_id(),
            title=self.title.strip(),
            author=self.author.strip(),
            status=self.status or ReadingStatus.WANT_TO_READ,
            format=self.format or BookFormat.UNKNOWN,
            rating=self.rating,
            isbn=self.isbn or None,
            notes=self.notes or None,
            date_added=self.date_added or None,
            date_started=self.date_started or None,
            date_finished=self.date_finished or None,
            cover_url=self.cover_url,
        )
