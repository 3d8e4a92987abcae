"""Shared CLI helpers: configuration from the environment and logging setup."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from mneme.core import config
from mneme.core.errors import ConfigError
from mneme.core.scheduler import ReviewScheduler
from mneme.core.storage import ReviewDatabase

console = Console()

# Global database instance (initialized lazily)
_db: ReviewDatabase | None = None


def get_database() -> ReviewDatabase:
    """Get or create the database instance."""
    global _db
    if _db is None:
        _db = ReviewDatabase(config.database_path())
    return _db


def get_scheduler() -> ReviewScheduler:
    return ReviewScheduler(get_database(), default_limit=config.review_limit())


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr through rich, at MNEME_LOG_LEVEL by default."""
    level = (level or os.environ.get("MNEME_LOG_LEVEL", "WARNING")).upper()
    if level not in logging.getLevelNamesMapping():
        raise ConfigError(f"Unknown log level {level!r}")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
