"""Dependency injection for FastAPI routes."""

from functools import lru_cache

from mneme.core import config
from mneme.core.scheduler import ReviewScheduler
from mneme.core.storage import ReviewDatabase


@lru_cache
def get_database() -> ReviewDatabase:
    """Get the database instance (singleton)."""
    return ReviewDatabase(config.database_path())


@lru_cache
def get_scheduler() -> ReviewScheduler:
    """Get the scheduler instance (singleton)."""
    return ReviewScheduler(get_database(), default_limit=config.review_limit())
