import asyncio
import logging
from datetime import date, datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Set, Union

import aiohttp
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.modules.search import schemas
from app.modules.search.client import PccClient, PccAPIError
from app.modules.search.reconciler import reconcile_tender, add_tag
from app.modules.tenders.services import build_tender_group, get_view
from app.modules.tenders.tender_helpers import build_tender_id, record_title, shorten

# Configure logging
logger = logging.getLogger(__name__)


def _hit_keys(hit: Dict[str, Any]):
    unit_id = hit.get("unit_id")
    job_number = hit.get("job_number")
    if not unit_id or not job_number:
        return None
    return str(unit_id), str(job_number)


async def fetch_histories(client: PccClient, hits: List[Dict[str, Any]], concurrency_limit: int) -> List[Any]:
    """
    Fetch the version history of each hit, at most concurrency_limit at a time.

    Returns:
        One entry per hit, in order: the records list, or the exception raised for it
    """
    semaphore = asyncio.Semaphore(max(1, concurrency_limit))

    async def fetch(hit):
        unit_id, job_number = _hit_keys(hit)
        async with semaphore:
            return await client.fetch_tender_history(unit_id, job_number)

    return await asyncio.gather(*(fetch(hit) for hit in hits), return_exceptions=True)


async def run_ingestion(
    db: Session,
    client: PccClient,
    user_id: int,
    keywords: List[str],
    date_range_months: Optional[int] = None,
    now: Optional[Union[date, datetime]] = None,
    reset_archive_on_new_version: Optional[bool] = None,
    concurrency_limit: Optional[int] = None
) -> AsyncIterator[Any]:
    """
    Run one ingestion for a user's keywords and yield stream events.

    Per keyword: one progress event, then one tender event per accepted tender
    not yet streamed in this run. A tender seen again under a later keyword
    only gets the keyword added to its tags. A tender whose fetch or storage
    fails is logged and skipped. The run ends with exactly one complete event,
    or with one error event if something fails outside a single tender.

    Args:
        db: Database session owned by the caller
        client: Procurement API client
        user_id: The user the views are created for
        keywords: Keywords in processing order
        date_range_months: Trailing window for accepted versions
        now: Reference time for the window, defaults to the current time
        reset_archive_on_new_version: Overrides RESET_ARCHIVE_ON_NEW_VERSION
        concurrency_limit: Overrides INGEST_CONCURRENCY_LIMIT

    Yields:
        ProgressEvent, TenderEvent, CompleteEvent or ErrorEvent
    """
    window_months = date_range_months or settings.DEFAULT_DATE_RANGE_MONTHS
    if reset_archive_on_new_version is None:
        reset_archive_on_new_version = settings.RESET_ARCHIVE_ON_NEW_VERSION
    if concurrency_limit is None:
        concurrency_limit = settings.INGEST_CONCURRENCY_LIMIT
    now = now or datetime.now()

    total_found = 0
    processed_count = 0
    # Tender ids whose history was already reconciled in this run
    seen: Set[str] = set()

    try:
        total = len(keywords)
        for index, keyword in enumerate(keywords):
            yield schemas.ProgressEvent(
                current=index + 1,
                total=total,
                keyword=keyword,
                log=f'Searching for keyword: "{keyword}"'
            )

            try:
                hits = await client.search_tenders(keyword)
            except (PccAPIError, aiohttp.ClientError) as e:
                logger.error(f"Search failed for keyword '{keyword}', skipping: {str(e)}")
                continue

            total_found += len(hits)
            logger.info(f"Found {len(hits)} tenders for keyword '{keyword}'")

            pending = []
            for hit in hits:
                keys = _hit_keys(hit) if isinstance(hit, dict) else None
                if keys is None:
                    logger.warning(f"Search hit without unit_id/job_number for '{keyword}', skipping")
                    continue
                tender_id = build_tender_id(*keys)
                if tender_id in seen:
                    add_tag(db, tender_id, keyword)
                    continue
                seen.add(tender_id)
                pending.append(hit)

            histories = await fetch_histories(client, pending, concurrency_limit)

            for hit, history in zip(pending, histories):
                unit_id, job_number = _hit_keys(hit)
                if isinstance(history, BaseException):
                    if not isinstance(history, Exception):
                        raise history
                    logger.error(
                        f"Failed to fetch history of unit_id={unit_id} job_number={job_number}: {str(history)}"
                    )
                    continue
                if not history:
                    continue

                try:
                    result = reconcile_tender(
                        db, user_id, keyword, unit_id, job_number, history,
                        window_months, now, reset_archive_on_new_version
                    )
                    if result is None:
                        continue
                    group = build_tender_group(result.tender, get_view(db, user_id, result.tender.id))
                except (SQLAlchemyError, ValueError, TypeError, KeyError) as e:
                    db.rollback()
                    logger.error(
                        f"Error processing tender unit_id={unit_id} job_number={job_number}, skipping: {str(e)}",
                        exc_info=True
                    )
                    continue

                processed_count += 1
                label = "New tender" if result.is_new else ("Updated tender" if result.has_new_versions else "Existing tender")
                logger.info(f"{label}: {shorten(record_title(history[0]))}")

                yield schemas.TenderEvent(
                    keyword=keyword,
                    tender=group.tender,
                    versions=group.versions,
                    related_tenders=group.related_tenders,
                    is_new=result.is_new,
                    has_new_versions=result.has_new_versions
                )

        yield schemas.CompleteEvent(
            total_found=total_found,
            processed_count=processed_count,
            log="Finished processing all keywords"
        )
    except Exception as e:
        logger.error(f"Error in search stream: {str(e)}", exc_info=True)
        yield schemas.ErrorEvent(error=str(e))
