"""Festival gateway client: listing, search and per-festival detail.

The gateway proxies TourAPI and wraps every response as
``{"data": {"response": {"body": {"items": {"item": [...]}}}}}``. When
there is nothing to return TourAPI sends ``"items": ""``; single results
sometimes arrive as a bare object instead of a one-element list. Both are
normalised to lists here.

Every failure (transport, HTTP status, JSON, envelope shape) surfaces as
FetchError; an empty page is a normal result, not an error.
"""

import asyncio
import logging
import time

import httpx
import mlflow
from mlflow.entities import SpanType

from festivalscope.catalog.normalize import normalize_detail, normalize_summary
from festivalscope.config import settings
from festivalscope.core.errors import FetchError
from festivalscope.core.types import DetailRecord, ListingParams, SummaryRecord

logger = logging.getLogger(__name__)

LIST_PATH = "/festivals/list"
SEARCH_PATH = "/festivals/search"
INFO_PATH = "/festivals/info"
DETAIL_INTRO_PATH = "/festivals/detailIntro"


def extract_items(payload: dict, source: str) -> list[dict]:
    """Pull the item list out of the gateway envelope."""
    try:
        items = payload["data"]["response"]["body"]["items"]
    except (KeyError, TypeError) as e:
        raise FetchError(source, f"unexpected response shape: missing {e}") from e

    if not items:
        return []
    if not isinstance(items, dict):
        raise FetchError(source, f"unexpected items node: {type(items).__name__}")

    item = items.get("item")
    if item is None:
        return []
    if isinstance(item, dict):
        return [item]
    if isinstance(item, list):
        return [i for i in item if isinstance(i, dict)]
    raise FetchError(source, f"unexpected item node: {type(item).__name__}")


class FestivalApiClient:
    """Async client for the festival gateway.

    Use as an async context manager to share one connection pool across
    all calls; otherwise each call opens a short-lived client.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        list_lang: str | None = None,
        detail_lang: str | None = None,
    ):
        self.base_url = base_url or settings.festival_api_url
        self.timeout = timeout or settings.http_timeout
        self.page_size = page_size or settings.festival_page_size
        self.list_lang = list_lang or settings.festival_list_lang
        self.detail_lang = detail_lang or settings.festival_detail_lang
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "FestivalApiClient":
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self

    async def __aexit__(self, *exc) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_items(self, path: str, params: dict) -> list[dict]:
        """GET a gateway path and return its items, raising FetchError on any failure."""
        start = time.monotonic()
        try:
            if self._client is not None:
                resp = await self._client.get(path, params=params)
            else:
                async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
                    resp = await client.get(path, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            raise FetchError(path, f"request failed: {e}") from e
        except ValueError as e:
            raise FetchError(path, f"invalid JSON: {e}") from e

        items = extract_items(payload, path)
        logger.debug(
            "GET %s %s → %d items", path, params, len(items),
            extra={"source": path, "duration_ms": round((time.monotonic() - start) * 1000)},
        )
        return items

    @mlflow.trace(name="fetch_festival_page", span_type=SpanType.RETRIEVER)
    async def fetch_page(self, params: ListingParams, page_no: int) -> list[SummaryRecord]:
        """One page of the browse listing."""
        items = await self._get_items(
            LIST_PATH,
            {
                "lang": self.list_lang,
                "numOfRows": self.page_size,
                "pageNo": page_no,
                "eventStartDate": params.event_start_date,
                "areaCode": params.area_code,
            },
        )
        return [normalize_summary(item) for item in items]

    @mlflow.trace(name="fetch_festival_search_page", span_type=SpanType.RETRIEVER)
    async def fetch_search_page(self, keyword: str, page_no: int) -> list[SummaryRecord]:
        """One page of keyword search results."""
        items = await self._get_items(
            SEARCH_PATH,
            {
                "keyword": keyword,
                "lang": self.list_lang,
                "pageNo": page_no,
                "numOfRows": self.page_size,
            },
        )
        return [normalize_summary(item) for item in items]

    async def _fetch_info(self, identifier: str) -> list[dict]:
        try:
            return await self._get_items(INFO_PATH, {"lang": self.detail_lang, "contentId": identifier})
        except FetchError as e:
            logger.warning(
                "Overview unavailable for %s: %s", identifier, e,
                extra={"identifier": identifier, "source": INFO_PATH},
            )
            return []

    @mlflow.trace(name="fetch_festival_detail", span_type=SpanType.RETRIEVER)
    async def fetch_detail(self, identifier: str, type_identifier: str) -> DetailRecord:
        """Period/venue (detailIntro) and description (info) for one festival.

        Both endpoints are queried concurrently. The period is mandatory;
        a missing or failed info item only leaves the description empty.
        """
        intro_items, info_items = await asyncio.gather(
            self._get_items(
                DETAIL_INTRO_PATH,
                {"lang": self.detail_lang, "contentId": identifier, "contentTypeId": type_identifier},
            ),
            self._fetch_info(identifier),
        )
        if not intro_items:
            raise FetchError(DETAIL_INTRO_PATH, f"no detail for {identifier}")
        return normalize_detail(identifier, intro_items[0], info_items[0] if info_items else None)
