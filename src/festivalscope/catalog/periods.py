"""Festival period formatting and parsing.

Raw TourAPI dates are 8-digit strings (``20240710``). They are shown as
dotted dates (``2024.07.10``) and a period reads ``2024.07.10 ~ 2024.07.20``.
``parse_period`` is the only place that turns such a string back into
dates; everything downstream sees either a valid ``Period`` or ``None``.
"""

import logging
from datetime import date

from festivalscope.core.errors import ParseError
from festivalscope.core.types import Period

logger = logging.getLogger(__name__)

PERIOD_SEPARATOR = "~"


def format_raw_date(raw: str | None) -> str:
    """'20240710' → '2024.07.10'. Anything that isn't 8 characters passes through."""
    if not raw or len(raw) != 8:
        return raw or ""
    return f"{raw[:4]}.{raw[4:6]}.{raw[6:8]}"


def format_period(start_raw: str | None, end_raw: str | None) -> str:
    return f"{format_raw_date(start_raw)} {PERIOD_SEPARATOR} {format_raw_date(end_raw)}"


def parse_dotted_date(text: str) -> date:
    """Parse 'YYYY.MM.DD' into a date, raising ParseError on malformed input."""
    parts = text.strip().split(".")
    if len(parts) != 3:
        raise ParseError(text, "expected year.month.day")
    try:
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError as e:
        raise ParseError(text, str(e)) from e


def parse_period(text: str | None) -> Period | None:
    """Parse '<start> ~ <end>' into a Period, or None when either side is invalid."""
    if not text or PERIOD_SEPARATOR not in text:
        return None
    start_text, _, end_text = text.partition(PERIOD_SEPARATOR)
    try:
        start = parse_dotted_date(start_text)
        end = parse_dotted_date(end_text)
    except ParseError as e:
        logger.debug("Unparseable period %r: %s", text, e.reason)
        return None
    return Period(start=start, end=end)
