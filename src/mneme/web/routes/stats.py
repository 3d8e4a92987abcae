"""Statistics route."""

from fastapi import APIRouter, Depends

from mneme.core.storage import ReviewDatabase
from mneme.web.dependencies import get_database

router = APIRouter()


@router.get("")
async def stats(db: ReviewDatabase = Depends(get_database)):
    return db.get_stats()
