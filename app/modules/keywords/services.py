import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.modules.auth.models import User
from app.modules.keywords.models import Keyword

# Configure logging
logger = logging.getLogger(__name__)


class KeywordLimitError(ValueError):
    """Raised when a free-tier user tries to follow more keywords than allowed"""


def normalize_keyword(text: Optional[str]) -> str:
    """Keywords are compared lower-cased and trimmed"""
    return (text or "").strip().lower()


def get_user_keywords(db: Session, user_id: int, active_only: bool = False) -> List[Keyword]:
    """
    Get all keywords for a user, newest first.
    """
    query = db.query(Keyword).filter(Keyword.user_id == user_id)
    if active_only:
        query = query.filter(Keyword.is_active.is_(True))
    return query.order_by(Keyword.created_at.desc(), Keyword.id.desc()).all()


def get_keyword(db: Session, user_id: int, keyword_id: int) -> Optional[Keyword]:
    return db.query(Keyword).filter(
        Keyword.id == keyword_id,
        Keyword.user_id == user_id
    ).first()


def add_keyword(db: Session, user: User, text: str) -> Keyword:
    """
    Follow a keyword for a user.

    Re-adding a keyword the user already has re-activates it instead of
    creating a duplicate. The free-tier cap counts active and inactive
    keywords and only applies when a new row would be created.

    Raises:
        ValueError: If the keyword is empty
        KeywordLimitError: If a free-tier user already holds the maximum number of keywords
    """
    normalized = normalize_keyword(text)
    if not normalized:
        raise ValueError("Keyword is required")

    existing = db.query(Keyword).filter(
        Keyword.user_id == user.id,
        Keyword.text == normalized
    ).first()

    if existing:
        logger.info(f"Keyword '{normalized}' already followed by user {user.id}, re-activating")
        existing.is_active = True
        db.commit()
        db.refresh(existing)
        return existing

    if not user.is_pro:
        count = db.query(Keyword).filter(Keyword.user_id == user.id).count()
        if count >= settings.FREE_TIER_KEYWORD_LIMIT:
            raise KeywordLimitError(
                f"Free tier limited to {settings.FREE_TIER_KEYWORD_LIMIT} keywords"
            )

    keyword = Keyword(user_id=user.id, text=normalized, is_active=True)
    try:
        db.add(keyword)
        db.commit()
    except IntegrityError as e:
        # Another request created the same keyword between our check and our insert
        db.rollback()
        logger.warning(f"IntegrityError while adding keyword: {str(e)}")
        keyword = db.query(Keyword).filter(
            Keyword.user_id == user.id,
            Keyword.text == normalized
        ).first()
        if keyword is None:
            raise ValueError(f"Could not add keyword: {str(e)}")
        return keyword

    db.refresh(keyword)
    logger.info(f"User {user.id} now follows keyword '{normalized}'")
    return keyword


def update_keyword(db: Session, user_id: int, keyword_id: int,
                   is_active: Optional[bool] = None, text: Optional[str] = None) -> Optional[Keyword]:
    """
    Update a keyword owned by the user.

    Returns:
        The updated keyword, or None if the user has no such keyword

    Raises:
        ValueError: If the new text is empty or already followed
    """
    keyword = get_keyword(db, user_id, keyword_id)
    if not keyword:
        return None

    if text is not None:
        normalized = normalize_keyword(text)
        if not normalized:
            raise ValueError("Keyword is required")
        clash = db.query(Keyword).filter(
            Keyword.user_id == user_id,
            Keyword.text == normalized,
            Keyword.id != keyword_id
        ).first()
        if clash:
            raise ValueError(f"Keyword '{normalized}' already exists")
        keyword.text = normalized

    if is_active is not None:
        keyword.is_active = is_active

    db.commit()
    db.refresh(keyword)
    logger.debug(f"Updated keyword {keyword_id} for user {user_id}")
    return keyword


def delete_keyword(db: Session, user_id: int, keyword_id: int) -> bool:
    """
    Delete a keyword owned by the user.

    Returns:
        bool: True if a keyword was deleted
    """
    keyword = get_keyword(db, user_id, keyword_id)
    if not keyword:
        logger.warning(f"Keyword {keyword_id} not found for user {user_id}")
        return False

    db.delete(keyword)
    db.commit()
    return True
