"""Core domain types shared across all festivalscope modules."""

from festivalscope.core.errors import FestivalscopeError, FetchError, ParseError
from festivalscope.core.types import (
    ALL,
    PLACEHOLDER_PERIOD,
    Browsing,
    BrowserStatus,
    DetailRecord,
    FilterState,
    KeywordMode,
    ListingParams,
    MergedViewRecord,
    Mode,
    Period,
    Searching,
    SummaryRecord,
)

__all__ = [
    "ALL",
    "PLACEHOLDER_PERIOD",
    "Browsing",
    "BrowserStatus",
    "DetailRecord",
    "FestivalscopeError",
    "FetchError",
    "FilterState",
    "KeywordMode",
    "ListingParams",
    "MergedViewRecord",
    "Mode",
    "ParseError",
    "Period",
    "Searching",
    "SummaryRecord",
]
