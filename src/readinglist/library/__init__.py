"""Reading-list views."""

from .filters import RATED, UNRATED, filter_books

__all__ = ["RATED", "UNRATED", "filter_books"]
