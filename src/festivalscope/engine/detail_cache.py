"""Per-festival detail cache.

Detail records (period, venue, long description) are not part of the
listing and are fetched one festival at a time. The cache records what
has resolved and what is in flight so each identifier is fetched at most
once, no matter how often a card asks for it.

The cache is owned by a single browser session; it is never module-level.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType

from festivalscope.core.errors import FetchError
from festivalscope.core.types import DetailRecord

logger = logging.getLogger(__name__)

DetailFetcher = Callable[[str, str], Awaitable[DetailRecord]]
Listener = Callable[[str], None]


class DetailCache:
    """Identifier → DetailRecord, populated as individual fetches complete."""

    def __init__(self, fetch_detail: DetailFetcher | None = None, max_concurrent: int = 0):
        self._fetch_detail = fetch_detail
        self._entries: dict[str, DetailRecord] = {}
        self._pending: dict[str, asyncio.Task] = {}
        self._failed: set[str] = set()
        self._listeners: list[Listener] = []
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent > 0 else None
        self.version = 0

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, identifier: str) -> DetailRecord | None:
        """Return the resolved detail, or None while unresolved. Never blocks."""
        return self._entries.get(identifier)

    def snapshot(self) -> Mapping[str, DetailRecord]:
        """Read-only view of the resolved entries."""
        return MappingProxyType(self._entries)

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    @property
    def failed(self) -> frozenset[str]:
        return frozenset(self._failed)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def on_resolved(self, identifier: str, detail: DetailRecord) -> None:
        """Store a resolved detail. Safe to call repeatedly and in any order."""
        self._failed.discard(identifier)
        if self._entries.get(identifier) == detail:
            return
        self._entries[identifier] = detail
        self.version += 1
        for listener in self._listeners:
            listener(identifier)

    def request(self, identifier: str, type_identifier: str) -> asyncio.Task | None:
        """Start fetching detail for ``identifier`` unless already pending or resolved.

        Returns the task for a newly issued fetch, the existing task for a
        pending one, or None when the detail is already cached. Must be
        called from within a running event loop.
        """
        if identifier in self._entries:
            return None
        if identifier in self._pending:
            return self._pending[identifier]
        if self._fetch_detail is None:
            raise RuntimeError("DetailCache has no detail source")

        task = asyncio.get_running_loop().create_task(
            self._resolve(identifier, type_identifier),
            name=f"detail:{identifier}",
        )
        self._pending[identifier] = task
        return task

    async def _resolve(self, identifier: str, type_identifier: str) -> None:
        try:
            if self._semaphore is not None:
                async with self._semaphore:
                    detail = await self._fetch_detail(identifier, type_identifier)
            else:
                detail = await self._fetch_detail(identifier, type_identifier)
        except FetchError as e:
            # Record stays on its placeholder until someone requests it again
            self._failed.add(identifier)
            logger.warning(
                "Detail fetch failed for %s: %s", identifier, e,
                extra={"identifier": identifier},
            )
            return
        finally:
            self._pending.pop(identifier, None)

        self.on_resolved(identifier, detail)

    async def wait_pending(self) -> None:
        """Wait until every in-flight detail fetch has settled."""
        while self._pending:
            await asyncio.gather(*self._pending.values())
