from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
import logging

from app.core.config import settings
from app.core.database import get_session_factory, session_scope
from app.core.rate_limit import limit_search_rate
from app.modules.auth.models import User
from app.modules.search import schemas, services
from app.modules.search.client import PccClient, get_pcc_client

router = APIRouter(tags=["search"])

# Configure logging
logger = logging.getLogger(__name__)


@router.post("")
async def search_tenders(
    request: schemas.SearchRequest,
    current_user: User = Depends(limit_search_rate),
    session_factory=Depends(get_session_factory),
    client: PccClient = Depends(get_pcc_client)
):
    """
    Search the procurement API for the given keywords and stream the results.

    The response is a text/event-stream of `data: <json>` frames: progress
    events, one tender event per accepted tender, then a complete event.
    A stream that closes with an error event and no complete event failed.
    """
    keywords = [k.strip() for k in (request.keywords or []) if k and k.strip()]
    if not keywords:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No keywords provided"
        )

    if not current_user.is_pro and len(keywords) > settings.FREE_TIER_KEYWORD_LIMIT:
        logger.info(
            f"Free tier user {current_user.id} searched {len(keywords)} keywords, "
            f"keeping the first {settings.FREE_TIER_KEYWORD_LIMIT}"
        )
        keywords = keywords[:settings.FREE_TIER_KEYWORD_LIMIT]

    user_id = current_user.id
    date_range_months = request.date_range_months or settings.DEFAULT_DATE_RANGE_MONTHS

    async def event_stream():
        # The request-scoped session is closed before the body is sent
        with session_scope(session_factory) as db:
            async for event in services.run_ingestion(db, client, user_id, keywords, date_range_months):
                yield f"data: {event.model_dump_json(by_alias=True)}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"}
    )
