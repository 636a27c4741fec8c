"""Region and season lookup tables.

TourAPI identifies regions by numeric area codes. Addresses returned by
the listing embed the human region name, so region filtering is a
substring test against the label rather than an exact code comparison.
"""

from festivalscope.core.types import ALL

AREA_CODES: dict[str, str] = {
    "1": "서울",
    "2": "인천",
    "3": "대전",
    "4": "대구",
    "5": "광주",
    "6": "부산",
    "7": "울산",
    "8": "세종",
    "31": "경기도",
    "32": "강원도",
    "33": "충청북도",
    "34": "충청남도",
    "35": "경상북도",
    "36": "경상남도",
    "37": "전라북도",
    "38": "전라남도",
    "39": "제주도",
}

_LABEL_TO_CODE: dict[str, str] = {label: code for code, label in AREA_CODES.items()}

SEASON_TOKENS: dict[str, str] = {
    "spring": "봄",
    "summer": "여름",
    "autumn": "가을",
    "winter": "겨울",
}


def region_label(selector: str) -> str | None:
    """Resolve a region selector (area code or label) to its label.

    'all' and unknown selectors resolve to None.
    """
    if not selector or selector == ALL:
        return None
    if selector in AREA_CODES:
        return AREA_CODES[selector]
    if selector in _LABEL_TO_CODE:
        return selector
    return None


def region_code(selector: str) -> str:
    """Resolve a region selector to its area code, or '' for all/unknown."""
    if selector in AREA_CODES:
        return selector
    return _LABEL_TO_CODE.get(selector, "")


def season_token(season: str) -> str | None:
    """'summer' → '여름'. 'all' and unknown seasons resolve to None."""
    return SEASON_TOKENS.get((season or "").lower())
