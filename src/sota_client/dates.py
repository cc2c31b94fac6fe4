"""Calendar-date parsing and the DD/MM/YYYY wire rendering."""

from __future__ import annotations

from datetime import date, datetime

from .errors import InvalidArgument

WIRE_DATE_FORMAT = "%d/%m/%Y"

_STRING_FORMATS = ("%Y-%m-%d", "%Y%m%d", WIRE_DATE_FORMAT)


def parse_date(value: date | datetime | str) -> date:
    """Return the calendar date for ``value``.

    Accepts ``date``/``datetime`` objects (time of day is dropped) and
    strings in ``YYYY-MM-DD``, ``YYYYMMDD``, ``DD/MM/YYYY`` or full
    ISO-8601 timestamp form.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidArgument(f"Expected a date or date string, got {type(value).__name__}")

    text = value.strip()
    if not text:
        raise InvalidArgument("Date must not be empty")
    for fmt in _STRING_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidArgument(f"Unrecognised date: {value!r}") from None


def format_date(value: date | datetime | str) -> str:
    return parse_date(value).strftime(WIRE_DATE_FORMAT)
