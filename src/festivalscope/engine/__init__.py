"""Incremental detail-augmented filter engine."""

from festivalscope.engine.accumulator import PaginatedAccumulator
from festivalscope.engine.detail_cache import DetailCache
from festivalscope.engine.filters import apply_filters, matches
from festivalscope.engine.merger import merge, merge_all
from festivalscope.engine.pipeline import AggregationPipeline, FestivalBrowser, FestivalSource

__all__ = [
    "AggregationPipeline",
    "DetailCache",
    "FestivalBrowser",
    "FestivalSource",
    "PaginatedAccumulator",
    "apply_filters",
    "matches",
    "merge",
    "merge_all",
]
