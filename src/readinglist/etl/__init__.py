"""ETL module for importing and reconciling reading-list data.

This module handles deduplication of book records and the orchestration
of imports from Notion CSV and Markdown exports into the record store.
"""

from .dedupe import (
    MatchType,
    apply_metadata,
    are_same_book,
    count_duplicates,
    identity_key,
    match_books,
    merge_books,
    reconcile,
)
from .load import (
    ImportResult,
    add_book,
    enrich_books,
    import_files,
    import_text,
    remove_duplicates,
    update_rating,
    update_status,
)

__all__ = [
    # Dedupe
    "MatchType",
    "apply_metadata",
    "are_same_book",
    "count_duplicates",
    "identity_key",
    "match_books",
    "merge_books",
    "reconcile",
    # Load
    "ImportResult",
    "add_book",
    "enrich_books",
    "import_files",
    "import_text",
    "remove_duplicates",
    "update_rating",
    "update_status",
]
