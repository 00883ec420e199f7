import logging
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session, selectinload

from app.modules.tenders import schemas
from app.modules.tenders.models import Tender, TenderVersion, TenderView
from app.modules.tenders.tender_helpers import (
    classify, parse_tender_id, build_version_details, record_title
)
from app.modules.keywords.models import Keyword

# Configure logging
logger = logging.getLogger(__name__)


def serialize_version(version: TenderVersion) -> schemas.TenderVersion:
    """
    Shape a stored version for the dashboard.

    Versions stored before typed details existed get them rebuilt from the raw record.
    """
    category = version.category or classify(version.type).value
    details = version.details
    if not details:
        record = version.data or {}
        details = build_version_details(schemas.TenderCategory(category), record.get("detail")).model_dump()

    return schemas.TenderVersion(
        id=version.id,
        tender_id=version.tender_id,
        date=str(version.date),
        type=version.type,
        category=category,
        data=version.data or {},
        details=details,
        created_at=version.created_at
    )


def build_tender_group(tender: Tender, view: Optional[TenderView] = None) -> schemas.TenderGroup:
    """
    Build a tender group (tender card + versions, newest first) for one user's view.

    Args:
        tender: The tender with its versions loaded
        view: The user's view on the tender; absent means a fresh inbox entry

    Returns:
        TenderGroup: Card data taken from the latest version
    """
    versions = sorted(tender.versions, key=lambda v: v.date, reverse=True)
    latest = versions[0] if versions else None
    latest_record = latest.data if latest else {}
    unit_id, job_number = parse_tender_id(tender.id)
    brief = (latest_record or {}).get("brief") or {}

    summary = schemas.TenderSummary(
        id=tender.id,
        unit_id=unit_id,
        job_number=job_number,
        date=str(latest.date) if latest else None,
        title=record_title(latest_record) or "No title",
        tags=list(tender.tags or []),
        is_archived=bool(view.is_archived) if view else False,
        is_highlighted=bool(view.is_highlighted) if view else False,
        brief=brief if isinstance(brief, dict) else {}
    )

    return schemas.TenderGroup(
        tender=summary,
        versions=[serialize_version(v) for v in versions]
    )


def list_tender_groups(db: Session, user_id: int, archived: Optional[bool] = None) -> List[schemas.TenderGroup]:
    """
    Get the tenders a user can see, newest view activity first.

    Args:
        user_id: The ID of the user
        archived: True for the archive, False for the inbox, None for both

    Returns:
        List[TenderGroup]: One group per tender view
    """
    logger.debug(f"Listing tender views for user {user_id} (archived={archived})")

    query = db.query(TenderView).options(
        selectinload(TenderView.tender).selectinload(Tender.versions)
    ).filter(TenderView.user_id == user_id)
    if archived is not None:
        query = query.filter(TenderView.is_archived.is_(archived))

    views = query.order_by(TenderView.updated_at.desc(), TenderView.tender_id).all()
    return [build_tender_group(view.tender, view) for view in views]


def get_view(db: Session, user_id: int, tender_id: str) -> Optional[TenderView]:
    return db.query(TenderView).filter(
        TenderView.user_id == user_id,
        TenderView.tender_id == tender_id
    ).first()


def set_archived(db: Session, user_id: int, tender_id: str, is_archived: bool) -> Optional[TenderView]:
    """
    Move a tender between a user's inbox and archive.

    Returns:
        The updated view, or None if the user has no view for the tender
    """
    view = get_view(db, user_id, tender_id)
    if not view:
        logger.warning(f"No view on tender {tender_id} for user {user_id}")
        return None

    view.is_archived = is_archived
    db.commit()
    db.refresh(view)
    logger.info(f"User {user_id} set archived={is_archived} on tender {tender_id}")
    return view


def set_highlighted(db: Session, user_id: int, tender_id: str, is_highlighted: bool) -> Optional[TenderView]:
    """
    Flag or unflag a tender for a user.

    Returns:
        The updated view, or None if the user has no view for the tender
    """
    view = get_view(db, user_id, tender_id)
    if not view:
        logger.warning(f"No view on tender {tender_id} for user {user_id}")
        return None

    view.is_highlighted = is_highlighted
    db.commit()
    db.refresh(view)
    return view


def delete_orphaned_tenders(db: Session, dry_run: bool = False) -> Dict[str, Any]:
    """
    Delete tenders that no active keyword of any user refers to anymore.

    A tender is orphaned when none of its tags (compared case-insensitively)
    is the text of an active keyword. Versions and views go with the tender.

    Args:
        dry_run: Only report, delete nothing

    Returns:
        Dict with total_keywords, total_tenders, orphaned and dry_run
    """
    active_keywords = {
        (text or "").strip().lower()
        for (text,) in db.query(Keyword.text).filter(Keyword.is_active.is_(True)).all()
    }
    tenders = db.query(Tender).options(
        selectinload(Tender.versions), selectinload(Tender.views)
    ).all()

    orphaned = []
    for tender in tenders:
        tags = [str(tag).strip().lower() for tag in (tender.tags or [])]
        if any(tag in active_keywords for tag in tags):
            continue
        orphaned.append(tender)

    report = {
        "total_keywords": len(active_keywords),
        "total_tenders": len(tenders),
        "dry_run": dry_run,
        "orphaned": [
            {
                "id": tender.id,
                "tags": list(tender.tags or []),
                "version_count": len(tender.versions),
                "view_count": len(tender.views)
            }
            for tender in orphaned
        ]
    }
    logger.info(f"Found {len(orphaned)} orphaned tenders out of {len(tenders)}")

    if dry_run or not orphaned:
        return report

    try:
        for tender in orphaned:
            db.delete(tender)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting orphaned tenders: {str(e)}")
        raise

    logger.info(f"Deleted {len(orphaned)} orphaned tenders")
    return report
