"""Aggregation pipeline and the page-level browser controller.

Architecture:
  source page → PaginatedAccumulator (ordered, deduplicated)
              → merge_all() with the DetailCache snapshot
              → apply_filters() with the current FilterState
              → filtered view

The view is a total recomputation over the accumulated sequence, memoised
on the accumulator version, the cache version and the filter state, so it
is a pure function of current state regardless of the order in which
pages and details arrived.

``FestivalBrowser`` owns the accumulator, the detail cache and the filter
state, and is the only thing that mutates them.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date
from typing import Protocol

from festivalscope.catalog.regions import region_code
from festivalscope.config import settings
from festivalscope.core.errors import FetchError
from festivalscope.core.types import (
    Browsing,
    BrowserStatus,
    DetailRecord,
    FilterState,
    KeywordMode,
    ListingParams,
    MergedViewRecord,
    Mode,
    Searching,
    SummaryRecord,
)
from festivalscope.engine.accumulator import PaginatedAccumulator
from festivalscope.engine.detail_cache import DetailCache
from festivalscope.engine.filters import apply_filters
from festivalscope.engine.merger import merge_all
from festivalscope.observability.logging import mode_label

logger = logging.getLogger(__name__)


class FestivalSource(Protocol):
    """The three upstream collaborators the browser consumes."""

    async def fetch_page(self, params: ListingParams, page_no: int) -> list[SummaryRecord]: ...

    async def fetch_search_page(self, keyword: str, page_no: int) -> list[SummaryRecord]: ...

    async def fetch_detail(self, identifier: str, type_identifier: str) -> DetailRecord: ...


class AggregationPipeline:
    """Accumulator → merger → filter, recomputed whenever an input changes."""

    def __init__(self, accumulator: PaginatedAccumulator, details: DetailCache):
        self.accumulator = accumulator
        self.details = details
        self._merged_key: tuple[int, int] | None = None
        self._merged: list[MergedViewRecord] = []
        self._filtered_key: tuple[int, int, FilterState] | None = None
        self._filtered: list[MergedViewRecord] = []

    def merged(self) -> list[MergedViewRecord]:
        """Every accumulated record merged with its detail, unfiltered."""
        key = (self.accumulator.version, self.details.version)
        if key != self._merged_key:
            self._merged = merge_all(self.accumulator.records, self.details.snapshot())
            self._merged_key = key
        return list(self._merged)

    def filtered(self, state: FilterState) -> list[MergedViewRecord]:
        key = (self.accumulator.version, self.details.version, state)
        if key != self._filtered_key:
            self._filtered = apply_filters(self.merged(), state)
            self._filtered_key = key
        return list(self._filtered)


class FestivalBrowser:
    """A browsing session over the festival catalog.

    Holds the filter state, decides which upstream source feeds the
    accumulator (browse listing or keyword search), and exposes the
    filtered view plus paging flags to whatever renders it.
    """

    def __init__(
        self,
        source: FestivalSource,
        page_size: int | None = None,
        event_start_date: str | None = None,
        featured_count: int | None = None,
        delegate_region_upstream: bool | None = None,
        detail_concurrency: int | None = None,
    ):
        self.source = source
        self.event_start_date = (
            event_start_date if event_start_date is not None else settings.festival_event_start_date
        )
        self.featured_count = featured_count if featured_count is not None else settings.featured_count
        self.delegate_region_upstream = (
            delegate_region_upstream
            if delegate_region_upstream is not None
            else settings.delegate_region_upstream
        )
        self.accumulator = PaginatedAccumulator(page_size or settings.festival_page_size)
        self.details = DetailCache(
            source.fetch_detail,
            max_concurrent=(
                detail_concurrency if detail_concurrency is not None else settings.detail_concurrency
            ),
        )
        self.details.add_listener(self._on_detail_resolved)
        self.pipeline = AggregationPipeline(self.accumulator, self.details)
        self.state = FilterState()
        self.mode: Mode = self._mode_for(self.state)
        self._subscribers: list[Callable[["FestivalBrowser"], None]] = []

    # ------------------------------------------------------------------
    # Views and flags
    # ------------------------------------------------------------------

    @property
    def filtered_view(self) -> list[MergedViewRecord]:
        return self.pipeline.filtered(self.state)

    @property
    def unfiltered_view(self) -> list[MergedViewRecord]:
        return self.pipeline.merged()

    @property
    def featured_view(self) -> list[MergedViewRecord]:
        """The most recently created festivals, newest first."""
        ranked = sorted(self.pipeline.merged(), key=lambda v: v.created_time, reverse=True)
        return ranked[: self.featured_count]

    @property
    def is_searching(self) -> bool:
        return isinstance(self.mode, Searching)

    @property
    def has_more(self) -> bool:
        return self.accumulator.has_more

    @property
    def is_fetching_next(self) -> bool:
        return self.accumulator.is_fetching

    @property
    def load_more_failed(self) -> bool:
        return self.accumulator.error is not None and not self.accumulator.error_is_blocking

    @property
    def status(self) -> BrowserStatus:
        acc = self.accumulator
        if acc.error is not None and acc.error_is_blocking:
            return BrowserStatus.ERROR
        if acc.pages_loaded == 0:
            return BrowserStatus.LOADING
        if not self.filtered_view:
            return BrowserStatus.NO_RESULTS
        return BrowserStatus.READY

    def subscribe(self, callback: Callable[["FestivalBrowser"], None]) -> None:
        """Register a callback invoked after every state change."""
        self._subscribers.append(callback)

    def _notify(self) -> None:
        for callback in self._subscribers:
            callback(self)

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def _mode_for(self, state: FilterState) -> Mode:
        if state.is_searching:
            return Searching(keyword=state.search_keyword)
        area_code = region_code(state.region) if self.delegate_region_upstream else ""
        return Browsing(ListingParams(event_start_date=self.event_start_date, area_code=area_code))

    async def _fetch_page(self, page_no: int) -> list[SummaryRecord]:
        mode = self.mode
        if isinstance(mode, Searching):
            return await self.source.fetch_search_page(mode.keyword, page_no)
        return await self.source.fetch_page(mode.params, page_no)

    async def load_next_page(self) -> int:
        """Fetch the next page for the active mode.

        Safe to call on every scroll signal: a call while a page is in
        flight, or after the last page, does nothing. Failures are kept in
        the browser state rather than raised. A blocking first-page error
        stays in place until ``retry()`` or a mode change clears it.
        """
        acc = self.accumulator
        if acc.is_fetching or acc.exhausted:
            return 0
        if acc.error is not None and acc.error_is_blocking:
            logger.debug("Not loading: first page failed, waiting for retry")
            return 0
        try:
            added = await self.accumulator.fetch_next(self._fetch_page)
        except FetchError:
            self._notify()
            return 0
        self._notify()
        return added

    async def _switch_mode_if_needed(self) -> None:
        mode = self._mode_for(self.state)
        if mode == self.mode:
            return
        logger.info(
            "Mode change %s → %s, resetting results", mode_label(self.mode), mode_label(mode),
            extra={"mode": mode},
        )
        self.mode = mode
        self.accumulator.reset()
        await self.load_next_page()

    # ------------------------------------------------------------------
    # Filter state mutation
    # ------------------------------------------------------------------

    async def set_filter(self, state: FilterState) -> None:
        """Replace the whole filter state and refetch if the source changed."""
        self.state = state
        self._notify()
        await self._switch_mode_if_needed()

    async def set_query(self, query: str | None) -> None:
        await self.set_filter(self.state.with_query(query))

    async def apply_keywords(self, keywords: Iterable[str], mode: KeywordMode | None = None) -> None:
        await self.set_filter(self.state.with_keywords(keywords, mode))

    async def set_keyword_mode(self, mode: KeywordMode) -> None:
        await self.set_filter(self.state.with_keyword_mode(mode))

    async def set_region(self, region: str) -> None:
        await self.set_filter(self.state.with_region(region))

    async def set_season(self, season: str) -> None:
        await self.set_filter(self.state.with_season(season))

    async def set_date_range(self, start: date | None, end: date | None) -> None:
        await self.set_filter(self.state.with_date_range(start, end))

    async def reset_filters(self) -> None:
        """Clear every criterion; the view becomes the full merged sequence."""
        await self.set_filter(FilterState())

    async def retry(self) -> None:
        """Recover from a blocking error: clear filters and fetch from scratch."""
        self.state = FilterState()
        self.mode = self._mode_for(self.state)
        self.accumulator.reset()
        self._notify()
        await self.load_next_page()

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    def request_details(self, views: Iterable[MergedViewRecord | SummaryRecord]) -> int:
        """Ask for details of the given (rendered) festivals. Returns fetches issued."""
        issued = 0
        for view in views:
            if view.identifier in self.details or view.identifier in self.details.pending:
                continue
            self.details.request(view.identifier, view.type_identifier)
            issued += 1
        return issued

    def report_detail(self, identifier: str, detail: DetailRecord) -> None:
        """Store a detail resolved outside the browser's own fetches."""
        self.details.on_resolved(identifier, detail)

    def _on_detail_resolved(self, identifier: str) -> None:
        logger.debug("Detail resolved for %s", identifier, extra={"identifier": identifier})
        self._notify()
