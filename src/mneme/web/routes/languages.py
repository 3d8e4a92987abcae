"""Language routes."""

from fastapi import APIRouter, Depends, Response, status

from mneme.core.errors import NotFound
from mneme.core.models import CreateLanguageRequest, Language, VocabularyItem
from mneme.core.storage import ReviewDatabase
from mneme.web.dependencies import get_database

router = APIRouter()


@router.get("", response_model=list[Language])
async def list_languages(db: ReviewDatabase = Depends(get_database)):
    return db.list_languages()


@router.post("", response_model=Language, status_code=status.HTTP_201_CREATED)
async def create_language(
    req: CreateLanguageRequest,
    db: ReviewDatabase = Depends(get_database),
):
    return db.create_language(req)


@router.delete("/{language_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_language(language_id: int, db: ReviewDatabase = Depends(get_database)):
    """Delete a language, cascading to its vocabulary and review cards."""
    db.delete_language(language_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{language_id}/vocabulary", response_model=list[VocabularyItem])
async def list_vocabulary(language_id: int, db: ReviewDatabase = Depends(get_database)):
    if db.get_language(language_id) is None:
        raise NotFound("Language", language_id)
    return db.list_vocabulary(language_id)
