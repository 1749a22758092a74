"""Book import from Notion exports (CSV and Markdown)."""

from .base import CandidateRecord
from .delimited import import_delimited_text, tokenize_row
from .markup import import_light_markup
from .normalize import (
    coerce_date,
    generate_id,
    map_format_vocabulary,
    map_status_vocabulary,
    normalize_for_comparison,
    parse_numeric_rating,
    parse_rating_notation,
)

__all__ = [
    "CandidateRecord",
    "import_delimited_text",
    "import_light_markup",
    "tokenize_row",
    "coerce_date",
    "generate_id",
    "map_format_vocabulary",
    "map_status_vocabulary",
    "normalize_for_comparison",
    "parse_numeric_rating",
    "parse_rating_notation",
]
