"""
Timestamp helpers shared by the data and analytics layers.

Timestamps are stored as ISO 8601 strings in UTC with millisecond precision
and a trailing "Z" (e.g. "2026-10-19T13:45:00.000Z").
"""

from datetime import datetime, date, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def epoch_millis(moment: Optional[datetime] = None) -> int:
    moment = moment or utcnow()
    return int(moment.timestamp() * 1000)


def to_iso(moment: datetime) -> str:
    """Serialize a datetime in the stored timestamp format."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def now_iso() -> str:
    return to_iso(utcnow())


def parse_timestamp(value: Union[str, datetime, date]) -> datetime:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts the "Z" suffix, explicit offsets, naive strings (taken as UTC)
    and plain dates.

    Raises:
        ValueError: If the value is empty or not ISO 8601
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        if not value:
            raise ValueError("Empty timestamp")
        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        moment = datetime.fromisoformat(text)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Number of full days from start to end, truncated toward zero.
    Negative when end is before start.
    """
    seconds = (end - start).total_seconds()
    days = int(abs(seconds) // 86400)
    return days if seconds >= 0 else -days


def format_br_date(day: date) -> str:
    """dd/MM/yyyy, the format shown to users."""
    return day.strftime('%d/%m/%Y')
