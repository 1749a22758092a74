"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the readinglist application,
including databases, sample books and catalog lookups.
"""

import os
from pathlib import Path
from typing import Callable, Generator

import pytest

from readinglist.config import reset_config
from readinglist.db.schemas import Book, BookFormat, BookMetadata, ReadingStatus
from readinglist.db.store import Database, reset_db
from readinglist.imports.normalize import generate_id


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def db() -> Generator[Database, None, None]:
    """Create an in-memory test database."""
    reset_db()
    reset_config()

    database = Database(":memory:")
    database.create_tables()
    yield database

    reset_db()


@pytest.fixture(scope="function")
def file_db_env(tmp_path: Path) -> Generator[Path, None, None]:
    """Point READINGLIST_DB_PATH at a temporary file for global get_db() users."""
    reset_db()
    reset_config()

    db_path = tmp_path / "books.db"
    os.environ["READINGLIST_DB_PATH"] = str(db_path)

    yield db_path

    reset_db()
    reset_config()
    if "READINGLIST_DB_PATH" in os.environ:
        del os.environ["READINGLIST_DB_PATH"]


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_book() -> Callable[..., Book]:
    """Factory for books with a fresh id; keyword arguments override fields."""

    def _make(title: str = "The Great Gatsby", author: str = "F. Scott Fitzgerald", **fields) -> Book:
        return Book(id=fields.pop("id", generate_id()), title=title, author=author, **fields)

    return _make


@pytest.fixture
def sample_book(make_book) -> Book:
    """A fully populated finished book."""
    return make_book(
        status=ReadingStatus.FINISHED,
        format=BookFormat.BOOK,
        rating=5,
        isbn="9780743273565",
        date_added="2025-01-01",
        date_started="2025-01-02",
        date_finished="2025-01-15",
        notes="Green light.",
        page_count=180,
        genres=["Fiction", "Classic"],
    )


@pytest.fixture
def sample_books(make_book) -> list[Book]:
    """A small mixed reading list."""
    return [
        make_book(
            "Project Hail Mary",
            "Andy Weir",
            status=ReadingStatus.FINISHED,
            format=BookFormat.AUDIOBOOK,
            rating=5,
            date_finished="2025-03-10",
            page_count=496,
            genres=["Science Fiction"],
        ),
        make_book(
            "Dune",
            "Frank Herbert",
            status=ReadingStatus.CURRENTLY_READING,
            format=BookFormat.BOOK,
            page_count=688,
            genres=["Science Fiction", "Classic"],
        ),
        make_book(
            "Atomic Habits",
            "James Clear",
            status=ReadingStatus.WANT_TO_READ,
            format=BookFormat.EBOOK,
        ),
        make_book(
            "The Martian",
            "Andy Weir",
            status=ReadingStatus.ABANDONED,
            rating=2,
        ),
    ]


# ============================================================================
# CSV / Markdown Fixtures
# ============================================================================


@pytest.fixture
def notion_csv() -> str:
    """CSV in the shape of a Notion database export."""
    return (
        "\ufeffName,Author,Status,Type,Score /5,Date Finished,Cover,Notes\n"
        "Project Hail Mary,Andy Weir,Read,\U0001F509 Audiobook,⭐⭐⭐⭐⭐,"
        "\"March 10, 2025\",https://example.com/phm.jpg,Loved it\n"
        "Dune,Frank Herbert,Currently Reading,\U0001F4D6 Book,,,,\n"
        "\"The Long, Winding Road\",Someone,Want to read,Ebook,3.5,,not-a-url,\n"
    )


@pytest.fixture
def notion_markdown() -> str:
    """Markdown in the shape of a Notion page export."""
    return (
        "# Project Hail Mary\n"
        "Author: Andy Weir\n"
        "Status: Finished\n"
        "Format: Audiobook\n"
        "Rating: 4.5\n"
        "Notes: Rocky: best character\n"
        "\n"
        "# Dune\n"
        "Authors: Frank Herbert\n"
        "Status: Reading\n"
    )


# ============================================================================
# Metadata Lookup Fixtures
# ============================================================================


@pytest.fixture
def fake_lookup() -> Callable[[str, str], BookMetadata]:
    """Lookup that answers every query with the same catalog record."""

    def _lookup(title, author=None):
        return BookMetadata(
            title=title,
            author=author or "Unknown",
            isbn="9780000000001",
            cover_url="https://covers.example.com/1.jpg",
            description="From the catalog.",
            page_count=300,
        )

    return _lookup
