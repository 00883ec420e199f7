import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.modules.search.date_window import is_within_window
from app.modules.tenders.models import Tender, TenderVersion, TenderView
from app.modules.tenders.tender_helpers import (
    build_tender_id, classify, version_type_of, build_version_details
)

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of reconciling one tender's history for one user"""
    tender: Tender
    accepted_count: int  # Versions inside the date window
    created_count: int  # Versions stored by this run
    is_new: bool  # No view existed for the user before this run

    @property
    def has_new_versions(self) -> bool:
        return self.created_count > 0


def union_tags(tags: Optional[List[str]], keyword: str) -> List[str]:
    """Tags keep first-seen order; keyword is appended once"""
    merged = list(tags or [])
    if keyword and keyword not in merged:
        merged.append(keyword)
    return merged


def upsert_tender(db: Session, tender_id: str, keyword: str) -> Tender:
    """
    Get or create a tender and add keyword to its tags.
    """
    tender = db.query(Tender).filter(Tender.id == tender_id).first()
    if tender is None:
        tender = Tender(id=tender_id, tags=union_tags([], keyword))
        db.add(tender)
        try:
            db.commit()
        except IntegrityError as e:
            # Created by a concurrent run
            db.rollback()
            logger.warning(f"IntegrityError while creating tender {tender_id}: {str(e)}")
            tender = db.query(Tender).filter(Tender.id == tender_id).one()
        else:
            db.refresh(tender)
            logger.info(f"Created tender {tender_id}")
            return tender

    merged = union_tags(tender.tags, keyword)
    if merged != list(tender.tags or []):
        # JSON columns only detect reassignment
        tender.tags = merged
        db.commit()
        db.refresh(tender)
    return tender


def add_tag(db: Session, tender_id: str, keyword: str) -> Optional[Tender]:
    """Union keyword into an already stored tender's tags"""
    tender = db.query(Tender).filter(Tender.id == tender_id).first()
    if tender is None:
        return None
    merged = union_tags(tender.tags, keyword)
    if merged != list(tender.tags or []):
        tender.tags = merged
        db.commit()
    return tender


def store_version(db: Session, tender_id: str, record: Dict[str, Any]) -> bool:
    """
    Create the version for a record unless (tender_id, date, type) is already stored.

    Returns:
        bool: True if a version was created
    """
    version_type = version_type_of(record)
    version_date = int(record.get("date"))

    existing = db.query(TenderVersion.id).filter(
        TenderVersion.tender_id == tender_id,
        TenderVersion.date == version_date,
        TenderVersion.type == version_type
    ).first()
    if existing:
        logger.info(f"Version {version_date}/{version_type} of {tender_id} already exists")
        return False

    category = classify(version_type)
    version = TenderVersion(
        tender_id=tender_id,
        date=version_date,
        type=version_type,
        category=category.value,
        data=record,
        details=build_version_details(category, record.get("detail")).model_dump()
    )
    try:
        db.add(version)
        db.commit()
    except IntegrityError as e:
        # Stored by a concurrent run between the check and the insert
        db.rollback()
        logger.warning(f"IntegrityError while storing version {version_date}/{version_type} of {tender_id}: {str(e)}")
        return False

    logger.info(f"Stored version {version_date}/{version_type} ({category.value}) of {tender_id}")
    return True


def upsert_view(db: Session, user_id: int, tender_id: str, has_new_versions: bool,
                reset_archive_on_new_version: bool = False) -> bool:
    """
    Make the tender visible to the user.

    An existing view keeps its archive state, unless reset_archive_on_new_version
    is set and this run stored a new version, in which case it returns to the inbox.

    Returns:
        bool: True if the view was created by this call
    """
    view = db.query(TenderView).filter(
        TenderView.user_id == user_id,
        TenderView.tender_id == tender_id
    ).first()

    if view is not None:
        if reset_archive_on_new_version and has_new_versions and view.is_archived:
            view.is_archived = False
            db.commit()
            logger.info(f"Tender {tender_id} back in the inbox of user {user_id} after a new version")
        return False

    try:
        db.add(TenderView(user_id=user_id, tender_id=tender_id, is_archived=False, is_highlighted=False))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"IntegrityError while creating view on {tender_id} for user {user_id}: {str(e)}")
        return False
    return True


def reconcile_tender(db: Session, user_id: int, keyword: str, unit_id: str, job_number: str,
                     records: List[Dict[str, Any]], window_months: int,
                     now: Optional[Union[date, datetime]] = None,
                     reset_archive_on_new_version: bool = False) -> Optional[ReconcileResult]:
    """
    Store one tender's in-window versions and the user's view on it.

    Args:
        db: Database session
        user_id: The user running the ingestion
        keyword: The keyword that matched the tender
        unit_id: Procuring unit id from the API
        job_number: Job number from the API
        records: The tender's version history as returned by the API
        window_months: Trailing window in calendar months
        now: Reference time for the window
        reset_archive_on_new_version: Un-archive an existing view when a version is added

    Returns:
        ReconcileResult, or None when no record falls inside the window
    """
    tender_id = build_tender_id(unit_id, job_number)
    accepted = [r for r in records if isinstance(r, dict) and is_within_window(r.get("date"), window_months, now)]
    if not accepted:
        logger.info(f"No versions of {tender_id} inside the last {window_months} months")
        return None

    tender = upsert_tender(db, tender_id, keyword)

    created = 0
    for record in accepted:
        try:
            if store_version(db, tender_id, record):
                created += 1
        except (SQLAlchemyError, ValueError, TypeError) as e:
            db.rollback()
            logger.error(f"Failed to store version {record.get('date')} of {tender_id}: {str(e)}", exc_info=True)

    is_new = upsert_view(db, user_id, tender_id, created > 0, reset_archive_on_new_version)
    db.refresh(tender)

    return ReconcileResult(
        tender=tender,
        accepted_count=len(accepted),
        created_count=created,
        is_new=is_new
    )
