"""Raw TourAPI item normalization.

Converts the gateway's loosely-typed JSON items into ``SummaryRecord`` and
``DetailRecord``, and derives the display fields (location, keywords)
every downstream consumer relies on.
"""

from festivalscope.catalog.periods import format_period
from festivalscope.catalog.regions import AREA_CODES, SEASON_TOKENS
from festivalscope.core.types import UNKNOWN_REGION, DetailRecord, SummaryRecord


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_summary(item: dict) -> SummaryRecord:
    """Map a raw list/search item into a SummaryRecord."""
    return SummaryRecord(
        identifier=_text(item.get("contentid")),
        type_identifier=_text(item.get("contenttypeid")),
        title=_text(item.get("title")),
        region_code=_text(item.get("areacode")),
        address=_text(item.get("addr1")),
        address_detail=_text(item.get("addr2")),
        image=_text(item.get("firstimage")),
        image_thumbnail=_text(item.get("firstimage2")),
        overview=_text(item.get("overview")),
        created_time=_text(item.get("createdtime")),
    )


def normalize_detail(identifier: str, intro: dict, info: dict | None = None) -> DetailRecord:
    """Build a DetailRecord from the detailIntro item and the optional info item."""
    info = info or {}
    return DetailRecord(
        identifier=identifier,
        period=format_period(_text(intro.get("eventstartdate")), _text(intro.get("eventenddate"))),
        venue=_text(intro.get("eventplace")),
        description=_text(info.get("overview")),
        end_date=_text(intro.get("eventenddate")),
    )


def compose_location(summary: SummaryRecord) -> str:
    """'서울 세종대로 172, 광화문광장': region label followed by address fragments."""
    location = AREA_CODES.get(summary.region_code, UNKNOWN_REGION)
    if summary.address:
        location += f" {summary.address}"
    if summary.address_detail:
        location += f", {summary.address_detail}"
    return location


def derive_keywords(summary: SummaryRecord) -> tuple[str, ...]:
    """Keywords attached to a festival before any detail is known.

    The region label, plus any season token appearing in the title.
    """
    keywords: list[str] = []
    label = AREA_CODES.get(summary.region_code)
    if label:
        keywords.append(label)
    for token in SEASON_TOKENS.values():
        if token in summary.title and token not in keywords:
            keywords.append(token)
    return tuple(keywords)
