"""Reading statistics."""

from .analytics import ReadingStats, calculate_reading_stats, parse_book_date

__all__ = [
    "ReadingStats",
    "calculate_reading_stats",
    "parse_book_date",
]
