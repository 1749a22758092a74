"""Pydantic schemas for data validation.

These schemas define the book record shared by the importers, the
reconciliation engine and the record store. Attribute names are snake_case;
JSON output uses camelCase aliases so exported files keep the
``reading-list.json`` layout.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ReadingStatus(str, Enum):
    """Reading status of a book."""

    WANT_TO_READ = "want-to-read"
    CURRENTLY_READING = "currently-reading"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class BookFormat(str, Enum):
    """Physical or digital format of a book."""

    BOOK = "book"
    EBOOK = "ebook"
    AUDIOBOOK = "audiobook"
    UNKNOWN = "unknown"


RATING_MIN = 1
RATING_MAX = 5


def _valid_rating(v) -> Optional[float]:
    """Coerce a rating, dropping anything outside the 1-5 scale."""
    if v is None or v == "":
        return None
    try:
        v = float(v)
    except (TypeError, ValueError):
        return None
    if v < RATING_MIN or v > RATING_MAX:
        return None
    return v


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class BookMetadata(_CamelModel):
    """Result of an external catalog lookup."""

    title: str
    author: str
    isbn: Optional[str] = None
    cover_url: Optional[str] = None
    description: Optional[str] = None
    page_count: Optional[int] = Field(None, ge=0)
    published_date: Optional[str] = None
    genres: Optional[list[str]] = None
    rating: Optional[float] = None
    review_url: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def normalize_rating(cls, v) -> Optional[float]:
        return _valid_rating(v)


class Book(_CamelModel):
    """A reading-list entry."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, description="Book title")
    author: str = Field(..., min_length=1, description="Primary author")
    status: ReadingStatus = Field(default=ReadingStatus.WANT_TO_READ)
    format: BookFormat = Field(default=BookFormat.UNKNOWN)
    rating: Optional[float] = Field(None, description="Rating 1-5")
    isbn: Optional[str] = None

    # Dates are kept as text; imports may carry values that do not parse
    date_added: Optional[str] = None
    date_started: Optional[str] = None
    date_finished: Optional[str] = None

    # Descriptive metadata
    notes: Optional[str] = None
    description: Optional[str] = None
    cover_url: Optional[str] = None
    page_count: Optional[int] = Field(None, ge=0)
    published_date: Optional[str] = None
    genres: Optional[list[str]] = None
    review_url: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def normalize_rating(cls, v) -> Optional[float]:
        """Treat out-of-range or unparseable ratings as absent."""
        return _valid_rating(v)

    @field_validator("format", mode="before")
    @classmethod
    def default_format(cls, v) -> BookFormat:
        """Absent formats are stored as unknown."""
        return v or BookFormat.UNKNOWN

    @field_validator("isbn", mode="before")
    @classmethod
    def clean_isbn(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace and stray quotes from ISBN values."""
        if v is None:
            return None
        v = str(v).strip().strip('"').strip("'")
        return v if v else None

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, omitting absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BookUpdate(_CamelModel):
    """Schema for updating an existing book. All fields optional."""

    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    status: Optional[ReadingStatus] = None
    format: Optional[BookFormat] = None
    rating: Optional[float] = None
    isbn: Optional[str] = None
    date_added: Optional[str] = None
    date_started: Optional[str] = None
    date_finished: Optional[str] = None
    notes: Optional[str] = None
    description: Optional[str] = None
    cover_url: Optional[str] = None
    page_count: Optional[int] = Field(None, ge=0)
    published_date: Optional[str] = None
    genres: Optional[list[str]] = None
    review_url: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def normalize_rating(cls, v) -> Optional[float]:
        return _valid_rating(v)
