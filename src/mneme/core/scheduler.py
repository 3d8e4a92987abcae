"""SM-2 review scheduling for vocabulary cards."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from mneme.core.errors import InvalidQuality, NotFound
from mneme.core.models import MIN_EASE_FACTOR, DueReview, Quality, ReviewCard, as_utc, utcnow
from mneme.core.storage import ReviewDatabase

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_LIMIT = 20

# Fixed bootstrap intervals for the first and second passing reviews.
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1
# Upper bound on any interval (100 years), keeps next_review representable.
MAX_INTERVAL_DAYS = 36500


def parse_quality(value: object) -> Quality:
    """Convert a reviewer-supplied value to a Quality, rejecting anything else."""
    if isinstance(value, Quality):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuality(value)
    try:
        return Quality(value)
    except ValueError:
        raise InvalidQuality(value) from None


def _round_half_up(value: float) -> int:
    # Builtin round() is banker's rounding; intervals round .5 upward.
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: Quality) -> float:
    """Apply the SM-2 ease update, floored at MIN_EASE_FACTOR."""
    miss = 5 - int(quality)
    return max(ease_factor + (0.1 - miss * (0.08 + miss * 0.02)), MIN_EASE_FACTOR)


def schedule(card: ReviewCard, quality: object, now: datetime) -> ReviewCard:
    """Compute a card's next state after a review.

    Pure function: the input card is left untouched and the result depends
    only on the arguments.

    Args:
        card: Current scheduling state
        quality: Reviewer's rating, one of 1 (Hard), 3 (Good), 5 (Easy)
        now: Review time; the next review is scheduled relative to it

    Returns:
        A new ReviewCard for the same item

    Raises:
        InvalidQuality: If quality is not 1, 3 or 5
    """
    quality = parse_quality(quality)
    now = as_utc(now)

    ease_factor = next_ease_factor(card.ease_factor, quality)

    if quality.passed:
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL_DAYS
        elif repetitions == 2:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = min(_round_half_up(card.interval_days * ease_factor), MAX_INTERVAL_DAYS)
    else:
        repetitions = 0
        interval = LAPSE_INTERVAL_DAYS

    return card.model_copy(
        update={
            "ease_factor": ease_factor,
            "interval_days": interval,
            "repetitions": repetitions,
            "next_review": now + timedelta(days=interval),
            "last_reviewed": now,
        }
    )


@dataclass
class ReviewResult:
    """Result of reviewing a card."""

    card_id: int
    quality: Quality
    reviewed_at: datetime
    next_review: datetime
    interval_days: int
    ease_factor: float
    repetitions: int

    @property
    def lapsed(self) -> bool:
        return not self.quality.passed


class ReviewScheduler:
    """Selects due cards and applies reviews against a ReviewDatabase."""

    def __init__(self, db: ReviewDatabase, default_limit: int = DEFAULT_REVIEW_LIMIT):
        """Initialize scheduler.

        Args:
            db: ReviewDatabase instance for card state persistence
            default_limit: Due-set cap used when callers don't pass one
        """
        self.db = db
        self.default_limit = default_limit

    def due_cards(self, now: datetime, limit: int) -> list[DueReview]:
        """Cards due at ``now`` with their vocabulary, most overdue first."""
        return self.db.scan_due(as_utc(now), limit)

    def get_due_reviews(
        self, limit: int | None = None, now: datetime | None = None
    ) -> list[DueReview]:
        """Get the current due set.

        The result is a snapshot; callers should re-fetch after every review
        rather than working through a stale list.
        """
        if limit is None:
            limit = self.default_limit
        return self.due_cards(now or utcnow(), limit)

    def get_card(self, card_id: int) -> ReviewCard | None:
        return self.db.get_card(card_id)

    def submit_review(
        self, card_id: int, quality: object, now: datetime | None = None
    ) -> ReviewResult:
        """Review a card and persist its new state.

        Raises:
            InvalidQuality: If quality is not 1, 3 or 5; nothing is written
            NotFound: If card_id has no card; nothing is written
        """
        try:
            quality = parse_quality(quality)
        except InvalidQuality:
            logger.warning("Rejected quality %r for card %s", quality, card_id)
            raise

        card = self.db.get_card(card_id)
        if card is None:
            logger.warning("Review submitted for unknown card %s", card_id)
            raise NotFound("Review card", card_id)

        reviewed = schedule(card, quality, now or utcnow())
        self.db.save_review(card, reviewed, quality)

        logger.info(
            "Reviewed card %s with %s: interval %d -> %d days, ease %.2f -> %.2f",
            card_id,
            quality.name,
            card.interval_days,
            reviewed.interval_days,
            card.ease_factor,
            reviewed.ease_factor,
        )

        return ReviewResult(
            card_id=card_id,
            quality=quality,
            reviewed_at=reviewed.last_reviewed,
            next_review=reviewed.next_review,
            interval_days=reviewed.interval_days,
            ease_factor=reviewed.ease_factor,
            repetitions=reviewed.repetitions,
        )
