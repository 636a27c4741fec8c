"""Filter predicates over merged festival views.

A view passes when it satisfies every active criterion:

  1. text: keyword set (ALL/ANY over one combined haystack) or, when no
     keywords are selected, a free-text query tested per field
  2. region: the location contains the selected region's label
  3. season: the derived keywords include the season's token
  4. date range: the festival period overlaps the selected range

Inactive criteria ('all', empty, or a half-open date range) are skipped.
A view still on the placeholder period fails to parse and therefore only
drops out under an active date range.
"""

from collections.abc import Iterable

from festivalscope.catalog.periods import parse_period
from festivalscope.catalog.regions import region_label, season_token
from festivalscope.core.types import ALL, FilterState, KeywordMode, MergedViewRecord


def matches_text(view: MergedViewRecord, state: FilterState) -> bool:
    if state.keywords:
        haystack = " ".join([view.name, view.description, *view.keywords]).casefold()
        needles = [k.casefold() for k in state.keywords]
        if state.keyword_mode == KeywordMode.ALL:
            return all(n in haystack for n in needles)
        return any(n in haystack for n in needles)

    query = (state.query or "").strip().casefold()
    if not query:
        return True
    return any(query in field.casefold() for field in (view.name, view.location, view.description))


def matches_region(view: MergedViewRecord, state: FilterState) -> bool:
    if state.region == ALL:
        return True
    label = region_label(state.region)
    if label is None:
        # Free-form selector, match it as given
        label = state.region
    return label in view.location


def matches_season(view: MergedViewRecord, state: FilterState) -> bool:
    if state.season == ALL:
        return True
    token = season_token(state.season)
    if token is None:
        return False
    return token in view.keywords


def matches_date_range(view: MergedViewRecord, state: FilterState) -> bool:
    if not state.has_date_range:
        return True
    period = parse_period(view.period)
    if period is None:
        return False
    return period.overlaps(state.date_start, state.date_end)


_CRITERIA = (matches_text, matches_region, matches_season, matches_date_range)


def matches(view: MergedViewRecord, state: FilterState) -> bool:
    """True when ``view`` passes every active criterion of ``state``."""
    return all(criterion(view, state) for criterion in _CRITERIA)


def apply_filters(views: Iterable[MergedViewRecord], state: FilterState) -> list[MergedViewRecord]:
    """Keep the views that match, in their original order."""
    return [view for view in views if matches(view, state)]
