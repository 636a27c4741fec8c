"""Paginated result accumulator.

Collects summary records across list/search pages into one ordered,
deduplicated sequence. A record keeps the position where its identifier
was first seen; later pages never move or duplicate it.
"""

import logging
from collections.abc import Awaitable, Callable

from festivalscope.core.errors import FetchError
from festivalscope.core.types import SummaryRecord

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Awaitable[list[SummaryRecord]]]

FIRST_PAGE = 1


class PaginatedAccumulator:
    """Ordered, deduplicated store of summary records plus paging state."""

    def __init__(self, page_size: int):
        self.page_size = page_size
        self._records: list[SummaryRecord] = []
        self._seen: set[str] = set()
        self.next_page = FIRST_PAGE
        self.exhausted = False
        self.is_fetching = False
        self.error: FetchError | None = None
        self.error_is_blocking = False
        # Bumped on every change; consumers memoise on it
        self.version = 0
        self._generation = 0

    @property
    def records(self) -> tuple[SummaryRecord, ...]:
        return tuple(self._records)

    @property
    def has_more(self) -> bool:
        return not self.exhausted

    @property
    def pages_loaded(self) -> int:
        return self.next_page - FIRST_PAGE

    def __len__(self) -> int:
        return len(self._records)

    def append_page(self, records: list[SummaryRecord]) -> int:
        """Append records whose identifier is new. Returns the number appended."""
        added = 0
        for record in records:
            if record.identifier in self._seen:
                continue
            self._seen.add(record.identifier)
            self._records.append(record)
            added += 1
        if added:
            self.version += 1
        return added

    def reset(self) -> None:
        """Drop all records and paging state; a page still in flight is discarded."""
        self._records.clear()
        self._seen.clear()
        self.next_page = FIRST_PAGE
        self.exhausted = False
        self.is_fetching = False
        self.error = None
        self.error_is_blocking = False
        self._generation += 1
        self.version += 1

    async def fetch_next(self, fetch_page: PageFetcher) -> int:
        """Fetch and append the next page.

        No-op while a fetch is already in flight or once paging is
        exhausted. On FetchError the accumulated records are left as they
        were, the error is recorded, and the exception propagates. A
        cancelled fetch releases the in-flight flag without touching the
        cursor, so the same page is requested again next time.
        """
        if self.is_fetching or self.exhausted:
            return 0

        generation = self._generation
        page = self.next_page
        self.is_fetching = True
        try:
            records = await fetch_page(page)
        except FetchError as e:
            if generation != self._generation:
                logger.debug("Discarding failure of stale page %d", page)
                return 0
            self.error = e
            self.error_is_blocking = page == FIRST_PAGE
            self.version += 1
            logger.warning("Page %d failed: %s", page, e, extra={"page": page})
            raise
        finally:
            # After a reset the flag belongs to whatever fetch started since
            if generation == self._generation:
                self.is_fetching = False

        if generation != self._generation:
            logger.debug("Discarding stale page %d (accumulator was reset)", page)
            return 0

        self.error = None
        self.error_is_blocking = False
        self.next_page = page + 1
        if len(records) < self.page_size:
            self.exhausted = True
        added = self.append_page(records)
        # Flags changed even when nothing new arrived
        self.version += 1
        logger.info(
            "Page %d: %d records, %d new, %d total%s",
            page, len(records), added, len(self._records),
            " (exhausted)" if self.exhausted else "",
            extra={"page": page},
        )
        return added
