"""Configuration management for readinglist.

Loads configuration from environment variables and provides defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Metadata lookup
    lookup_timeout: int  # seconds
    google_books_api_key: Optional[str]

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "READINGLIST_DB_PATH",
            str(Path.home() / ".readinglist" / "books.db"),
        )
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            lookup_timeout=int(os.environ.get("READINGLIST_LOOKUP_TIMEOUT", "10")),
            google_books_api_key=os.environ.get("READINGLIST_GOOGLE_BOOKS_API_KEY"),
            log_level=os.environ.get("READINGLIST_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        if self.lookup_timeout <= 0:
            errors.append("READINGLIST_LOOKUP_TIMEOUT must be positive")

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")

        return errors


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the command line.

    Args:
        level: Level name; defaults to the configured READINGLIST_LOG_LEVEL
    """
    level_name = (level or get_config().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=LOG_FORMAT,
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
