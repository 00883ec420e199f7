from fastapi import APIRouter, Depends, HTTPException, status, Query
from app.modules.tenders import schemas, services
from typing import Optional, List
from app.modules.auth.services import get_current_user
from app.modules.auth.models import User
from sqlalchemy.orm import Session
from app.core.database import get_db
import logging

router = APIRouter(tags=["tenders"])

# Configure logging
logger = logging.getLogger(__name__)


@router.get("/views", response_model=List[schemas.TenderGroup])
def get_tender_views(
    archived: Optional[bool] = Query(None, description="True for the archive, False for the inbox, omit for both"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the tenders visible to the current user, grouped with their versions.
    """
    return services.list_tender_groups(db, current_user.id, archived)


@router.post("/archive", response_model=schemas.TenderViewResponse)
def archive_tender(
    request: schemas.ArchiveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Archive or un-archive a tender for the current user"""
    view = services.set_archived(db, current_user.id, request.tender_id, request.is_archived)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tender view not found"
        )
    return view


@router.post("/highlight", response_model=schemas.TenderViewResponse)
def highlight_tender(
    request: schemas.HighlightRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Highlight or un-highlight a tender for the current user"""
    view = services.set_highlighted(db, current_user.id, request.tender_id, request.is_highlighted)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tender view not found"
        )
    return view
