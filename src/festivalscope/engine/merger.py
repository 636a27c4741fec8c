"""Summary + detail merge. Pure: no state, no I/O."""

from collections.abc import Iterable, Mapping

from festivalscope.catalog.normalize import compose_location, derive_keywords
from festivalscope.core.types import PLACEHOLDER_PERIOD, DetailRecord, MergedViewRecord, SummaryRecord


def merge(summary: SummaryRecord, details: Mapping[str, DetailRecord]) -> MergedViewRecord:
    """Overlay the cached detail for ``summary`` (if any) onto its display fields."""
    detail = details.get(summary.identifier)
    return MergedViewRecord(
        identifier=summary.identifier,
        type_identifier=summary.type_identifier,
        name=summary.title,
        location=compose_location(summary),
        period=detail.period if detail else PLACEHOLDER_PERIOD,
        description=detail.description if detail and detail.description else summary.overview,
        image=summary.image,
        image_thumbnail=summary.image_thumbnail,
        keywords=derive_keywords(summary),
        created_time=summary.created_time,
        venue=detail.venue if detail else "",
        end_date=detail.end_date if detail else "",
        detail_resolved=detail is not None,
    )


def merge_all(
    summaries: Iterable[SummaryRecord], details: Mapping[str, DetailRecord],
) -> list[MergedViewRecord]:
    """Merge every summary, preserving order."""
    return [merge(summary, details) for summary in summaries]
