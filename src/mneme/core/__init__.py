"""Core library for Mneme."""

from mneme.core.errors import (
    ConfigError,
    InvalidQuality,
    MnemeError,
    NotFound,
    StoreUnavailable,
    ValidationFailed,
)
from mneme.core.models import (
    CreateLanguageRequest,
    CreateVocabularyRequest,
    DueReview,
    Language,
    Quality,
    ReviewCard,
    VocabularyItem,
)
from mneme.core.scheduler import ReviewResult, ReviewScheduler, schedule
from mneme.core.storage import ReviewDatabase

__all__ = [
    # Errors
    "ConfigError",
    "InvalidQuality",
    "MnemeError",
    "NotFound",
    "StoreUnavailable",
    "ValidationFailed",
    # Models
    "CreateLanguageRequest",
    "CreateVocabularyRequest",
    "DueReview",
    "Language",
    "Quality",
    "ReviewCard",
    "VocabularyItem",
    # Storage
    "ReviewDatabase",
    # Scheduler
    "ReviewResult",
    "ReviewScheduler",
    "schedule",
]
