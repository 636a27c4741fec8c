"""Domain types for the festivalscope catalog browser.

All shared dataclasses and type definitions live here to prevent
circular imports and establish a single source of truth for the
domain model. Every other module imports from here.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum

# Shown until a festival's detail record has been fetched.
PLACEHOLDER_PERIOD = "기간 정보 없음"

# Location prefix for festivals without a known area code.
UNKNOWN_REGION = "미정"

ALL = "all"


# ---------------------------------------------------------------------------
# Catalog records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SummaryRecord:
    """A lightweight catalog entry returned by a list or search page."""

    identifier: str
    type_identifier: str
    title: str
    region_code: str = ""
    address: str = ""
    address_detail: str = ""
    image: str = ""
    image_thumbnail: str = ""
    overview: str = ""
    created_time: str = ""


@dataclass(frozen=True)
class DetailRecord:
    """Per-festival data resolved from the detail endpoints."""

    identifier: str
    period: str
    venue: str = ""
    description: str = ""
    end_date: str = ""  # raw YYYYMMDD, used for ended detection


@dataclass(frozen=True)
class MergedViewRecord:
    """A summary record overlaid with the best detail available right now."""

    identifier: str
    type_identifier: str
    name: str
    location: str
    period: str
    description: str
    image: str
    image_thumbnail: str
    keywords: tuple[str, ...]
    created_time: str
    venue: str = ""
    end_date: str = ""
    detail_resolved: bool = False

    def is_ended(self, today: date) -> bool:
        """True when the resolved end date lies before ``today``."""
        if len(self.end_date) != 8 or not self.end_date.isdigit():
            return False
        return self.end_date < today.strftime("%Y%m%d")


@dataclass(frozen=True)
class Period:
    """A validated closed date interval."""

    start: date
    end: date

    def overlaps(self, start: date, end: date) -> bool:
        return self.start <= end and self.end >= start


# ---------------------------------------------------------------------------
# Filter state
# ---------------------------------------------------------------------------

class KeywordMode(str, Enum):
    ALL = "ALL"
    ANY = "ANY"


@dataclass(frozen=True)
class FilterState:
    """User-driven filter criteria.

    Instances are immutable; every ``with_*`` method returns a replacement.
    A keyword selection and a free-text query never coexist: setting one
    clears the other.
    """

    query: str | None = None
    keywords: tuple[str, ...] = ()
    keyword_mode: KeywordMode = KeywordMode.ANY
    region: str = ALL
    season: str = ALL
    date_start: date | None = None
    date_end: date | None = None

    def __post_init__(self):
        # Keep the state hashable whatever iterable the caller passed
        if not isinstance(self.keywords, tuple):
            object.__setattr__(self, "keywords", tuple(self.keywords))

    @property
    def is_searching(self) -> bool:
        return bool(self.keywords) or bool((self.query or "").strip())

    @property
    def search_keyword(self) -> str | None:
        """The single keyword sent to the upstream search endpoint."""
        if self.keywords:
            return self.keywords[0]
        query = (self.query or "").strip()
        return query or None

    @property
    def has_date_range(self) -> bool:
        return self.date_start is not None and self.date_end is not None

    def with_query(self, query: str | None) -> "FilterState":
        return replace(self, query=query, keywords=())

    def with_keywords(self, keywords: Iterable[str], mode: KeywordMode | None = None) -> "FilterState":
        return replace(
            self,
            keywords=tuple(keywords),
            keyword_mode=mode or self.keyword_mode,
            query=None,
        )

    def with_keyword_mode(self, mode: KeywordMode) -> "FilterState":
        return replace(self, keyword_mode=mode)

    def with_region(self, region: str) -> "FilterState":
        return replace(self, region=region or ALL)

    def with_season(self, season: str) -> "FilterState":
        return replace(self, season=season or ALL)

    def with_date_range(self, start: date | None, end: date | None) -> "FilterState":
        return replace(self, date_start=start, date_end=end)


# ---------------------------------------------------------------------------
# Fetch mode: which upstream source feeds the accumulator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ListingParams:
    """Parameters forwarded to the listing endpoint."""

    event_start_date: str = ""
    area_code: str = ""


@dataclass(frozen=True)
class Browsing:
    params: ListingParams = field(default_factory=ListingParams)


@dataclass(frozen=True)
class Searching:
    keyword: str


Mode = Browsing | Searching


class BrowserStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    NO_RESULTS = "no_results"
    ERROR = "error"
