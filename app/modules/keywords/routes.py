from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.orm import Session
from typing import List
import logging

from app.core.database import get_db
from app.modules.auth.models import User
from app.modules.auth.services import get_current_user
from app.modules.keywords import schemas, services

router = APIRouter(tags=["keywords"])

# Configure logging
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[schemas.KeywordResponse])
def list_keywords(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get all keywords followed by the current user, newest first"""
    return services.get_user_keywords(db, current_user.id)


@router.post("/", response_model=schemas.KeywordResponse)
def add_keyword(
    keyword_data: schemas.KeywordCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Follow a keyword.

    The keyword is stored lower-cased and trimmed. Adding a keyword that is
    already followed re-activates it. Free-tier users are capped.
    """
    try:
        return services.add_keyword(db, current_user, keyword_data.text)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.patch("/{keyword_id}", response_model=schemas.KeywordResponse)
def update_keyword(
    keyword_data: schemas.KeywordUpdate,
    keyword_id: int = Path(..., description="ID of the keyword to update"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Activate, deactivate or rename a keyword"""
    try:
        keyword = services.update_keyword(
            db,
            user_id=current_user.id,
            keyword_id=keyword_id,
            is_active=keyword_data.is_active,
            text=keyword_data.text
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if keyword is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Keyword {keyword_id} not found"
        )
    return keyword


@router.delete("/{keyword_id}", status_code=204, response_model=None)
def delete_keyword(
    keyword_id: int = Path(..., description="ID of the keyword to delete"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Stop following a keyword"""
    if not services.delete_keyword(db, current_user.id, keyword_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Keyword {keyword_id} not found"
        )
    return None
