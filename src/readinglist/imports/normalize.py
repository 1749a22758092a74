"""Field normalization for imported book data.

Export files label the same thing many ways ("Done", "Finished", "Read ✅"),
so each free-text field goes through a small, ordered vocabulary before it
reaches the Book schema. Nothing here raises on bad input: unmatched values
fall back to a default or come back as None.
"""

import re
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from ..db.schemas import BookFormat, ReadingStatus

_WHITESPACE = re.compile(r"\s+")


def generate_id() -> str:
    """Generate a fresh opaque book id."""
    return str(uuid4())


def normalize_for_comparison(s: Optional[str]) -> str:
    """Lowercase, trim and collapse whitespace. Comparison only."""
    if not s:
        return ""
    return _WHITESPACE.sub(" ", s.lower().strip())


# ============================================================================
# Status vocabulary
# ============================================================================

# "read" as a word, but not the "to read" / "to-read" wishlist phrasing
_READ_WORD = re.compile(r"(?<!to[ -])\bread\b")

Rule = tuple[Callable[[str], bool], ReadingStatus]

STATUS_RULES: list[Rule] = [
    (lambda s: "finished" in s, ReadingStatus.FINISHED),
    (lambda s: _READ_WORD.search(s) is not None, ReadingStatus.FINISHED),
    (lambda s: s == "done", ReadingStatus.FINISHED),
    (lambda s: "reading" in s or "current" in s, ReadingStatus.CURRENTLY_READING),
    (
        lambda s: "abandoned" in s or "dropped" in s or "quit" in s,
        ReadingStatus.ABANDONED,
    ),
    (
        lambda s: "ready to start" in s or "want to read" in s,
        ReadingStatus.WANT_TO_READ,
    ),
]

DEFAULT_STATUS = ReadingStatus.WANT_TO_READ


def map_status_vocabulary(raw: Optional[str]) -> ReadingStatus:
    """Map free-text status to a ReadingStatus. First matching rule wins."""
    value = (raw or "").lower().strip()
    for matches, status in STATUS_RULES:
        if matches(value):
            return status
    return DEFAULT_STATUS


# ============================================================================
# Format vocabulary
# ============================================================================

# Decorative markers Notion users put in select options
_FORMAT_DECORATIONS = re.compile("[\U0001F509\U0001F4D6\U0001F4F1\U0001F4DA\uFE0F]")

FORMAT_RULES: list[tuple[tuple[str, ...], BookFormat]] = [
    (("ebook", "e-book", "digital"), BookFormat.EBOOK),
    (("audio", "audible"), BookFormat.AUDIOBOOK),
    (("book", "physical", "hardcover", "paperback", "graphic novel"), BookFormat.BOOK),
]


def map_format_vocabulary(raw: Optional[str]) -> BookFormat:
    """Map free-text format to a BookFormat.

    ebook and audiobook are checked before the generic "book" keyword,
    which both of them contain.
    """
    value = _FORMAT_DECORATIONS.sub("", raw or "").strip().lower()
    for keywords, book_format in FORMAT_RULES:
        if any(keyword in value for keyword in keywords):
            return book_format
    return BookFormat.UNKNOWN


# ============================================================================
# Ratings
# ============================================================================

# Star emoji, with or without the variation selector, or a plain black star
_STAR_MARK = re.compile("\u2B50\uFE0F?|\u2605")


def parse_numeric_rating(raw: Optional[str]) -> Optional[float]:
    """Parse a plain number. Zero and non-numbers are treated as unrated."""
    if not raw or not raw.strip():
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if value != value or value == 0:  # NaN or unrated
        return None
    return value


def parse_rating_notation(raw: Optional[str]) -> Optional[float]:
    """Parse a star-mark or numeric rating.

    Star marks take precedence: "⭐⭐⭐" is 3. Otherwise a number between
    0 and 5 is accepted as-is, fractions included.
    """
    if not raw or not raw.strip():
        return None

    stars = _STAR_MARK.findall(raw)
    if stars:
        return float(len(stars))

    value = parse_numeric_rating(raw)
    if value is None or not 0 <= value <= 5:
        return None
    return value


# ============================================================================
# Dates
# ============================================================================

DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
]


def coerce_date(raw: Optional[str]) -> Optional[str]:
    """Best-effort conversion of a date to ISO-8601.

    Blank input gives None. A value that parses comes back as
    ``YYYY-MM-DD``; anything else is returned unchanged.
    """
    if not raw or not raw.strip():
        return None

    value = raw.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date().isoformat()
        except ValueError:
            continue

    return raw
