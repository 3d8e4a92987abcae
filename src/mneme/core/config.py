"""Settings read from the environment."""

import os
from pathlib import Path

from mneme.core.errors import ConfigError
from mneme.core.scheduler import DEFAULT_REVIEW_LIMIT


def state_dir() -> Path:
    """Directory holding the database, from MNEME_STATE_DIR."""
    return Path(os.environ.get("MNEME_STATE_DIR", Path.cwd() / ".mneme"))


def database_path() -> Path:
    return state_dir() / "mneme.db"


def review_limit() -> int:
    """Default due-set cap, from MNEME_REVIEW_LIMIT.

    Raises:
        ConfigError: If the variable is not a non-negative integer
    """
    raw = os.environ.get("MNEME_REVIEW_LIMIT")
    if raw is None or not raw.strip():
        return DEFAULT_REVIEW_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        raise ConfigError(f"MNEME_REVIEW_LIMIT must be an integer, got {raw!r}") from None
    if limit < 0:
        raise ConfigError(f"MNEME_REVIEW_LIMIT must be non-negative, got {limit}")
    return limit
