"""Pydantic models for languages, vocabulary items and review cards."""

from datetime import UTC, datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Floor for the ease factor; reviews can shrink it but never below this.
MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
# Qualities at or above this count as a successful recall.
PASSING_QUALITY = 3


def utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Quality(IntEnum):
    """Recall quality reported by the reviewer (Hard/Good/Easy buttons)."""

    HARD = 1
    GOOD = 3
    EASY = 5

    @property
    def passed(self) -> bool:
        """Whether this quality counts as a successful recall."""
        return self >= PASSING_QUALITY


class Language(BaseModel):
    """A language that owns vocabulary items."""

    id: int
    name: str
    code: str
    flag_emoji: str
    created_at: datetime


class VocabularyItem(BaseModel):
    """A word and its translation. Never mutated by the scheduler."""

    id: int
    language_id: int
    word: str
    translation: str
    pronunciation: str | None = None
    example_sentence: str | None = None
    difficulty_level: int = 1
    created_at: datetime


class ReviewCard(BaseModel):
    """Scheduling state for exactly one vocabulary item."""

    item_id: int
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    interval_days: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    next_review: datetime = Field(default_factory=utcnow)
    last_reviewed: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("next_review", "last_reviewed", "created_at")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    def is_due(self, now: datetime) -> bool:
        """A card is due once its next review time has passed."""
        return self.next_review <= as_utc(now)

    @classmethod
    def initial(cls, item_id: int, created_at: datetime) -> "ReviewCard":
        """Fresh card for a newly created item, due immediately."""
        return cls(item_id=item_id, next_review=created_at, created_at=created_at)


class DueReview(BaseModel):
    """A due card joined with the vocabulary it schedules."""

    card: ReviewCard
    item: VocabularyItem


class CreateLanguageRequest(BaseModel):
    """Input for creating a language."""

    name: str
    code: str
    flag_emoji: str


class CreateVocabularyRequest(BaseModel):
    """Input for creating a vocabulary item."""

    language_id: int
    word: str
    translation: str
    pronunciation: str | None = None
    example_sentence: str | None = None
    difficulty_level: int = 1


class ReviewSubmission(BaseModel):
    """Body of a review submitted over the HTTP API.

    ``quality`` is kept as sent (no coercion) so that the scheduler rejects
    booleans, strings and floats instead of pydantic converting them.
    """

    quality: Any
