import re
from typing import Dict, Any, Optional, List, Tuple
from app.modules.tenders.schemas import (
    TenderCategory, Companies, BiddingDetails, AwardedDetails, FailedDetails, DeliveryDetails
)


# Version type used when a record carries no announcement type at all.
# Not to be confused with the display category, which falls back to bidding.
UNKNOWN_VERSION_TYPE = "unknown"

FAILED_MARKER = "無法決標"
AWARDED_MARKER = "決標"
DELIVERY_MARKER = "彙送"

_BIDDER_NAME_KEY = re.compile(r"^投標廠商:投標廠商(\d+):廠商名稱$")
_ITEM_WINNER_KEY = re.compile(r"^決標品項:第(\d+)品項:得標廠商(\d+):得標廠商$")


def build_tender_id(unit_id: Any, job_number: Any) -> str:
    """Stable tender identity derived from the procurement API keys"""
    return f"unit_id={unit_id}&job_number={job_number}"


def parse_tender_id(tender_id: str) -> Tuple[str, str]:
    """
    Split a tender identity back into (unit_id, job_number).
    Missing parts come back as empty strings.
    """
    unit_id = ""
    job_number = ""
    if "unit_id=" in tender_id:
        unit_id = tender_id.split("unit_id=", 1)[1].split("&job_number=", 1)[0]
    if "job_number=" in tender_id:
        job_number = tender_id.split("job_number=", 1)[1]
    return unit_id, job_number


def classify(type_label: Optional[str]) -> TenderCategory:
    """
    Map an announcement type label to its display category.

    The failed check has to run before the awarded one: every
    "無法決標" label also contains "決標".
    """
    label = (type_label or "").lower()
    if FAILED_MARKER in label:
        return TenderCategory.FAILED
    if AWARDED_MARKER in label:
        return TenderCategory.AWARDED
    if DELIVERY_MARKER in label:
        return TenderCategory.DELIVERY
    return TenderCategory.BIDDING


def version_type_of(record: Dict[str, Any]) -> str:
    """
    Announcement type of a record, used as part of the version identity.
    Falls back to the detail's own type field, then to "unknown".
    """
    brief = record.get("brief") or {}
    detail = record.get("detail") or {}
    label = None
    if isinstance(brief, dict):
        label = brief.get("type")
    if not label and isinstance(detail, dict):
        label = detail.get("type")
    if isinstance(label, str) and label.strip():
        return label.strip()
    return UNKNOWN_VERSION_TYPE


def _first_value(detail: Dict[str, Any], sources: List[str]) -> Optional[str]:
    for source in sources:
        value = detail.get(source)
        if value not in (None, ""):
            return value if isinstance(value, str) else str(value)
    return None


def agency_mapping():
    agency_mapping = {
        "agency_name": {"sources": ["機關資料:機關名稱"]},
        "unit_name": {"sources": ["機關資料:單位名稱"]},
        "contact_person": {"sources": ["機關資料:聯絡人"]},
        "contact_phone": {"sources": ["機關資料:聯絡電話"]},
    }
    return agency_mapping


def bidding_mapping():
    # Published notices ("已公告資料") take precedence over the original form fields
    bidding_mapping = {
        "budget": {"sources": ["已公告資料:預算金額", "採購資料:預算金額"]},
        "budget_public": {"sources": ["已公告資料:預算金額是否公開", "採購資料:預計金額是否公開"]},
        "tender_method": {"sources": ["已公告資料:招標方式", "招標資料:招標方式"]},
        "award_method": {"sources": ["已公告資料:決標方式", "招標資料:決標方式"]},
        "has_base_price": {"sources": ["已公告資料:是否訂有底價", "招標資料:是否訂有底價"]},
        "price_in_evaluation": {"sources": ["已公告資料:價格是否納入評選", "招標資料:價格是否納入評選"]},
        "tender_status": {"sources": ["已公告資料:招標狀態", "招標資料:招標狀態"]},
        "announce_date": {"sources": ["已公告資料:公告日", "招標資料:公告日"]},
        "bid_deadline": {"sources": ["已公告資料:截止投標", "領投開標:截止投標"]},
        "opening_time": {"sources": ["已公告資料:開標時間", "領投開標:開標時間"]},
        "bid_location": {"sources": ["已公告資料:收受投標文件地點", "領投開標:收受投標文件地點"]},
    }
    return bidding_mapping


def award_mapping():
    award_mapping = {
        "total_amount": {"sources": ["決標資料:總決標金額", "已公告資料:預算金額"]},
        "amount_public": {"sources": ["決標資料:總決標金額是否公開", "已公告資料:預算金額是否公開"]},
        "base_price": {"sources": ["決標資料:底價金額"]},
        "award_date": {"sources": ["決標資料:決標日期"]},
    }
    return award_mapping


def failure_mapping():
    failure_mapping = {
        "reason": {"sources": ["無法決標公告:無法決標的理由", "無法決標資料:無法決標的理由"]},
        "failure_date": {"sources": ["無法決標公告:無法決標公告日期", "無法決標資料:無法決標日期"]},
        "next_action": {"sources": [
            "無法決標公告:是否沿用本案號及原招標方式續行招標",
            "無法決標資料:是否沿用本案號及原招標方式續行招標",
        ]},
    }
    return failure_mapping


def map_detail_fields(detail: Dict[str, Any], mapping_config: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Read the fields named in a mapping config out of a localized detail map.
    """
    return {
        field: _first_value(detail, config["sources"])
        for field, config in mapping_config.items()
    }


def extract_companies(detail: Dict[str, Any]) -> Companies:
    """
    Collect the bidder roster from "投標廠商:投標廠商N:*" keys.
    Address, phone and period lists stay aligned with the names list.
    """
    companies = Companies()
    bidders = []
    for key in detail.keys():
        match = _BIDDER_NAME_KEY.match(key)
        if match:
            bidders.append((int(match.group(1)), key))

    for index, key in sorted(bidders):
        name = detail.get(key)
        if not name:
            continue
        prefix = f"投標廠商:投標廠商{index}"
        company_id = detail.get(f"{prefix}:廠商代碼")

        companies.names.append(name)
        companies.name_key.setdefault(name, []).append(key)
        if company_id:
            companies.ids.append(company_id)
            companies.id_key.setdefault(company_id, []).append(key)
        companies.addresses.append(detail.get(f"{prefix}:廠商地址") or "")
        companies.phones.append(detail.get(f"{prefix}:廠商電話") or "")
        companies.periods.append(detail.get(f"{prefix}:履約起迄日期") or "")

    return companies


def find_award_winner(detail: Dict[str, Any], total_amount: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Winning vendor and bid of an award announcement.

    The first bidder flagged "是否得標 = 是" wins; otherwise the first
    awarded item ("決標品項") names the vendor.
    """
    bidder_indexes = sorted(
        int(match.group(1))
        for match in (_BIDDER_NAME_KEY.match(key) for key in detail.keys())
        if match
    )
    for index in bidder_indexes:
        prefix = f"投標廠商:投標廠商{index}"
        name = detail.get(f"{prefix}:廠商名稱")
        if name and detail.get(f"{prefix}:是否得標") == "是":
            return name, detail.get(f"{prefix}:決標金額") or total_amount

    for key in detail.keys():
        match = _ITEM_WINNER_KEY.match(key)
        if not match or not detail.get(key):
            continue
        item_index, vendor_index = match.groups()
        bid = detail.get(f"決標品項:第{item_index}品項:得標廠商{vendor_index}:決標金額")
        return detail[key], bid or total_amount

    return None, None


def build_version_details(category: TenderCategory, detail: Optional[Dict[str, Any]]):
    """
    Typed view of a record's detail map for its display category.

    Args:
        category: Display category from classify()
        detail: The record's localized "detail" map (may be missing)

    Returns:
        One of BiddingDetails, AwardedDetails, FailedDetails, DeliveryDetails
    """
    if not isinstance(detail, dict):
        detail = {}

    agency = map_detail_fields(detail, agency_mapping())

    if category == TenderCategory.FAILED:
        return FailedDetails(**agency, **map_detail_fields(detail, failure_mapping()))

    if category == TenderCategory.AWARDED:
        award = map_detail_fields(detail, award_mapping())
        winner, winning_bid = find_award_winner(detail, award["total_amount"])
        return AwardedDetails(
            **agency,
            **award,
            winner=winner,
            winning_bid=winning_bid,
            companies=extract_companies(detail)
        )

    if category == TenderCategory.DELIVERY:
        return DeliveryDetails(**agency)

    return BiddingDetails(**agency, **map_detail_fields(detail, bidding_mapping()))


def record_title(record: Optional[Dict[str, Any]]) -> Optional[str]:
    brief = (record or {}).get("brief") or {}
    if isinstance(brief, dict):
        return brief.get("title")
    return None


def shorten(text: Optional[str], limit: int = 30) -> str:
    """Title excerpt for progress log lines"""
    if not text:
        return "Unnamed"
    return text if len(text) <= limit else f"{text[:limit]}..."
