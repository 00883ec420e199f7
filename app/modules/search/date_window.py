import calendar
import logging
from datetime import date, datetime
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


def subtract_months(moment: Union[date, datetime], months: int) -> date:
    """
    Calendar month subtraction on the date part of moment.
    The day is clamped to the length of the target month (31 Mar - 1 month = 29 Feb 2024).
    """
    day_of = moment.date() if isinstance(moment, datetime) else moment
    total = day_of.year * 12 + (day_of.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(day_of.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_record_date(value: Any) -> Optional[date]:
    """
    Read a YYYYMMDD record date (int or str, extra trailing digits ignored).
    Returns None when the value is missing or not a real date.
    """
    if value is None or isinstance(value, bool):
        return None
    digits = str(value).strip()
    if len(digits) < 8 or not digits[:8].isdigit():
        return None
    try:
        return date(int(digits[:4]), int(digits[4:6]), int(digits[6:8]))
    except ValueError:
        return None


def is_within_window(record_date: Any, window_months: int, now: Optional[Union[date, datetime]] = None) -> bool:
    """
    True when record_date falls between now minus window_months and now, both ends included.
    Dates after now and unparseable dates are rejected.
    """
    now = now or datetime.now()
    today = now.date() if isinstance(now, datetime) else now
    parsed = parse_record_date(record_date)
    if parsed is None:
        logger.debug(f"Rejecting record with invalid date {record_date!r}")
        return False
    threshold = subtract_months(today, window_months)
    return threshold <= parsed <= today
