from pydantic import Field
from typing import Optional, List, Literal
from app.modules.tenders.schemas import CamelModel, TenderSummary, TenderVersion


class SearchRequest(CamelModel):
    """Body of POST /api/search"""
    keywords: Optional[List[str]] = None
    date_range_months: Optional[int] = Field(None, ge=1, le=120)


class ProgressEvent(CamelModel):
    type: Literal["progress"] = "progress"
    current: int
    total: int
    keyword: Optional[str] = None
    log: Optional[str] = None


class TenderEvent(CamelModel):
    """One accepted tender with all its stored versions, newest first"""
    type: Literal["tender"] = "tender"
    keyword: str
    tender: TenderSummary
    versions: List[TenderVersion] = []
    related_tenders: List[dict] = []
    is_new: bool = False
    has_new_versions: bool = False


class CompleteEvent(CamelModel):
    type: Literal["complete"] = "complete"
    total_found: int
    processed_count: int
    log: Optional[str] = None


class ErrorEvent(CamelModel):
    type: Literal["error"] = "error"
    error: str
