# fleet_digest/common/dates.py
"""
Calendar date helpers shared by the fetch layer and the digest serializer.

Fleetio timestamps arrive as ISO-8601 strings, sometimes as bare dates
('2024-01-05') and sometimes as full timestamps with an offset
('2024-01-05T14:03:11.000-05:00'). Both consumers only care about the
calendar date in the timezone the timestamp was written in, so no timezone
conversion happens here.
"""

from datetime import date, datetime

__all__: list[str] = ['parse_calendar_date', 'to_iso_date']


def parse_calendar_date(value: str) -> date:
    """
    Parse an ISO-8601 date or datetime string into a calendar date.

    Args:
        value: Date ('YYYY-MM-DD') or datetime string. A trailing 'Z' is
            accepted as UTC.

    Returns:
        The calendar date portion, in the timezone given by the string.

    Raises:
        ValueError: If the string is empty or not ISO-8601.
    """
    text: str = value.strip()
    if not text:
        raise ValueError('Cannot parse an empty date string')

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # datetime.fromisoformat accepts 'Z' from Python 3.11 onward
    return datetime.fromisoformat(text).date()


def to_iso_date(value: date | str) -> str:
    """
    Render a date (or date-like string) as 'YYYY-MM-DD'.

    Args:
        value: A date/datetime object, or an ISO-8601 string.

    Returns:
        Canonical 'YYYY-MM-DD' string.

    Raises:
        ValueError: If a string value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return parse_calendar_date(value).isoformat()
