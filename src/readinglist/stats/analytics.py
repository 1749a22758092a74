"""Reading statistics over a list of books.

Provides the dashboard numbers:
- Counts by status, format and rating
- Finished this year / this month
- Page totals
- Top authors and genres
- Twelve-month finish timeline and recent finishes
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..db.schemas import Book, BookFormat, ReadingStatus
from ..imports.normalize import coerce_date

TOP_N = 5
TIMELINE_MONTHS = 12


@dataclass
class ReadingStats:
    """Aggregate statistics for a reading list."""

    total_books: int = 0
    books_by_status: dict[ReadingStatus, int] = field(
        default_factory=lambda: {status: 0 for status in ReadingStatus}
    )
    books_by_format: dict[BookFormat, int] = field(
        default_factory=lambda: {book_format: 0 for book_format in BookFormat}
    )
    books_by_rating: dict[int, int] = field(
        default_factory=lambda: {rating: 0 for rating in range(1, 6)}
    )
    finished_books: int = 0
    currently_reading: int = 0
    want_to_read: int = 0
    abandoned: int = 0
    average_rating: float = 0.0
    total_ratings: int = 0
    books_finished_this_year: int = 0
    books_finished_this_month: int = 0
    total_pages: int = 0
    average_pages: float = 0.0
    top_authors: list[tuple[str, int]] = field(default_factory=list)
    top_genres: list[tuple[str, int]] = field(default_factory=list)
    reading_timeline: list[tuple[str, int]] = field(default_factory=list)
    recent_finishes: list[Book] = field(default_factory=list)


def parse_book_date(value: Optional[str]) -> Optional[date]:
    """Parse a stored date, or None if it is not a calendar date."""
    iso = coerce_date(value)
    if not iso:
        return None
    try:
        return date.fromisoformat(iso[:10])
    except ValueError:
        return None


def _months_back(today: date, count: int) -> list[tuple[int, int]]:
    """(year, month) pairs for the last `count` months, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def calculate_reading_stats(books: list[Book], today: Optional[date] = None) -> ReadingStats:
    """Calculate dashboard statistics.

    Args:
        books: The reading list
        today: Reference date for "this year/month" (default: today)

    Returns:
        ReadingStats
    """
    today = today or date.today()
    stats = ReadingStats(total_books=len(books))

    for book in books:
        stats.books_by_status[book.status] += 1
        stats.books_by_format[book.format] += 1

    stats.finished_books = stats.books_by_status[ReadingStatus.FINISHED]
    stats.currently_reading = stats.books_by_status[ReadingStatus.CURRENTLY_READING]
    stats.want_to_read = stats.books_by_status[ReadingStatus.WANT_TO_READ]
    stats.abandoned = stats.books_by_status[ReadingStatus.ABANDONED]

    # Ratings
    rated = [b for b in books if b.rating]
    stats.total_ratings = len(rated)
    if rated:
        stats.average_rating = sum(b.rating for b in rated) / len(rated)
        for book in rated:
            if book.rating.is_integer():
                stats.books_by_rating[int(book.rating)] += 1

    # Pages
    with_pages = [b for b in books if b.page_count]
    stats.total_pages = sum(b.page_count for b in with_pages)
    if with_pages:
        stats.average_pages = stats.total_pages / len(with_pages)

    # Finishes this year / month and the timeline
    months = _months_back(today, TIMELINE_MONTHS)
    per_month: Counter = Counter()
    finished_dates: list[tuple[date, Book]] = []

    for book in books:
        finished = parse_book_date(book.date_finished)
        if finished is None:
            continue
        if finished.year == today.year:
            stats.books_finished_this_year += 1
            if finished.month == today.month:
                stats.books_finished_this_month += 1
        per_month[(finished.year, finished.month)] += 1
        if book.status == ReadingStatus.FINISHED:
            finished_dates.append((finished, book))

    stats.reading_timeline = [
        (date(y, m, 1).strftime("%b %Y"), per_month[(y, m)]) for y, m in months
    ]

    # Most common first; ties keep first-seen order
    stats.top_authors = Counter(b.author for b in books).most_common(TOP_N)
    stats.top_genres = Counter(
        genre for b in books for genre in (b.genres or [])
    ).most_common(TOP_N)

    finished_dates.sort(key=lambda pair: pair[0], reverse=True)
    stats.recent_finishes = [book for _, book in finished_dates[:TOP_N]]

    return stats
