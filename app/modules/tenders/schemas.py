from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Union, Literal, Annotated
from datetime import datetime
from enum import Enum


class CamelModel(BaseModel):
    """Base for payloads exchanged with the dashboard, which speaks camelCase"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class TenderCategory(str, Enum):
    BIDDING = "bidding"
    AWARDED = "awarded"
    FAILED = "failed"
    DELIVERY = "delivery"


class Companies(CamelModel):
    """Bidder roster of an award announcement, in the order the API lists bidders"""
    ids: List[str] = []
    names: List[str] = []
    addresses: List[str] = []
    phones: List[str] = []
    periods: List[str] = []
    # Company id / name -> detail keys it was read from
    id_key: Dict[str, List[str]] = {}
    name_key: Dict[str, List[str]] = {}


class AgencyDetails(CamelModel):
    agency_name: Optional[str] = None
    unit_name: Optional[str] = None
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None


class BiddingDetails(AgencyDetails):
    category: Literal["bidding"] = "bidding"
    budget: Optional[str] = None
    budget_public: Optional[str] = None
    tender_method: Optional[str] = None
    award_method: Optional[str] = None
    has_base_price: Optional[str] = None
    price_in_evaluation: Optional[str] = None
    tender_status: Optional[str] = None
    announce_date: Optional[str] = None
    bid_deadline: Optional[str] = None
    opening_time: Optional[str] = None
    bid_location: Optional[str] = None


class AwardedDetails(AgencyDetails):
    category: Literal["awarded"] = "awarded"
    total_amount: Optional[str] = None
    amount_public: Optional[str] = None
    base_price: Optional[str] = None
    award_date: Optional[str] = None
    winner: Optional[str] = None
    winning_bid: Optional[str] = None
    companies: Companies = Field(default_factory=Companies)


class FailedDetails(AgencyDetails):
    category: Literal["failed"] = "failed"
    reason: Optional[str] = None
    failure_date: Optional[str] = None
    next_action: Optional[str] = None


class DeliveryDetails(AgencyDetails):
    category: Literal["delivery"] = "delivery"


VersionDetails = Annotated[
    Union[BiddingDetails, AwardedDetails, FailedDetails, DeliveryDetails],
    Field(discriminator="category")
]


class TenderVersion(CamelModel):
    """A stored tender version as sent to the dashboard"""
    id: Optional[int] = None
    tender_id: str
    # Serialized as a string, the API dates exceed what some clients parse as numbers
    date: str
    type: str
    category: TenderCategory
    data: Dict[str, Any] = {}
    details: Optional[VersionDetails] = None
    created_at: Optional[datetime] = None


class TenderSummary(CamelModel):
    """Board card data for a tender, taken from its latest version"""
    id: str
    unit_id: str
    job_number: str
    date: Optional[str] = None
    title: str = "No title"
    tags: List[str] = []
    is_archived: bool = False
    is_highlighted: bool = False
    brief: Dict[str, Any] = {}


class TenderGroup(CamelModel):
    """A tender with its versions, newest first"""
    tender: TenderSummary
    versions: List[TenderVersion] = []
    related_tenders: List[Dict[str, Any]] = []


class ArchiveRequest(CamelModel):
    tender_id: str
    is_archived: bool


class HighlightRequest(CamelModel):
    tender_id: str
    is_highlighted: bool


class TenderViewResponse(CamelModel):
    user_id: int
    tender_id: str
    is_archived: bool
    is_highlighted: bool
    updated_at: Optional[datetime] = None
