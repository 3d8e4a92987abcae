"""Review session routes: fetch the due set and submit answers."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from mneme.core.models import DueReview, ReviewSubmission
from mneme.core.scheduler import ReviewScheduler
from mneme.web.dependencies import get_scheduler

router = APIRouter()


@router.get("/due", response_model=list[DueReview])
async def due_reviews(
    limit: int | None = Query(default=None, ge=0),
    scheduler: ReviewScheduler = Depends(get_scheduler),
):
    """Due cards with their vocabulary, most overdue first."""
    return scheduler.get_due_reviews(limit=limit)


@router.post("/{card_id}")
async def submit_review(
    card_id: int,
    submission: ReviewSubmission,
    scheduler: ReviewScheduler = Depends(get_scheduler),
):
    """Apply a review. Clients should fetch the due set again afterwards."""
    result = scheduler.submit_review(card_id, submission.quality)
    return {**asdict(result), "lapsed": result.lapsed}
