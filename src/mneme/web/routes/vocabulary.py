"""Vocabulary routes."""

from fastapi import APIRouter, Depends, Query, Response, status

from mneme.core.errors import NotFound
from mneme.core.models import CreateVocabularyRequest, VocabularyItem
from mneme.core.storage import DEFAULT_SEARCH_LIMIT, ReviewDatabase
from mneme.web.dependencies import get_database

router = APIRouter()


@router.post("", response_model=VocabularyItem, status_code=status.HTTP_201_CREATED)
async def create_vocabulary(
    req: CreateVocabularyRequest,
    db: ReviewDatabase = Depends(get_database),
):
    """Create an item; its review card is created with it and is due at once."""
    return db.create_vocabulary(req)


@router.get("/search", response_model=list[VocabularyItem])
async def search_vocabulary(
    q: str = Query(default=""),
    limit: int = Query(default=DEFAULT_SEARCH_LIMIT, ge=1),
    db: ReviewDatabase = Depends(get_database),
):
    return db.search_vocabulary(q, limit)


@router.get("/{item_id}", response_model=VocabularyItem)
async def get_vocabulary(item_id: int, db: ReviewDatabase = Depends(get_database)):
    item = db.get_vocabulary(item_id)
    if item is None:
        raise NotFound("Vocabulary item", item_id)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vocabulary(item_id: int, db: ReviewDatabase = Depends(get_database)):
    db.delete_vocabulary(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
