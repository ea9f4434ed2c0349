"""Date parsing for values read out of XML documents.

Dates in XML come in many shapes: `xs:date` / `xs:dateTime` ISO strings,
RFC 822 dates in feeds, or free text. ISO forms are tried first since
they are by far the most common, the fuzzier parsers only afterwards.

Values missing the year, month or day are rejected: both fuzzy parsers
would otherwise fill the gaps from the current date.
"""

from __future__ import annotations

from datetime import date, datetime

from dateparser import parse as dateparse2
from dateutil.parser import ParserError
from dateutil.parser import parse as dateparse

# Two defaults differing in year, month and day; a value parsed against
# both only yields the same result if it names all three.
_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

_DATEPARSER_SETTINGS = {"REQUIRE_PARTS": ["day", "month", "year"]}


def _parse_complete(value: str) -> datetime | None:
    try:
        first, second = (dateparse(value, default=d) for d in _DEFAULTS)
    except (ParserError, OverflowError, ValueError):
        return dateparse2(value, settings=_DATEPARSER_SETTINGS)
    if first != second:
        return None
    return first


def ensure_datetime(value: str) -> datetime | None:
    """Parse a string into a datetime object.

    Tries datetime.fromisoformat, dateutil.parse and dateparser.parse,
    in that order. A missing time of day reads as midnight.

    Args:
        value: The string to parse.

    Returns:
        A datetime object, or None if no parser understood the value
        as a complete date.

    Example:
        >>> ensure_datetime("2024-01-15T10:30:00")
        datetime.datetime(2024, 1, 15, 10, 30)
        >>> ensure_datetime("Mon, 15 Jan 2024 10:30:00 GMT")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=tzutc())
        >>> ensure_datetime("March") is None
        True
    """
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    return _parse_complete(value)


def ensure_date(value: str) -> date | None:
    """Parse a string into a date object.

    Example:
        >>> ensure_date("2024-01-15")
        datetime.date(2024, 1, 15)
        >>> ensure_date("January 15, 2024")
        datetime.date(2024, 1, 15)
    """
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        pass
    parsed = ensure_datetime(value)
    return parsed.date() if parsed else None
