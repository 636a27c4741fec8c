"""Shared test fixtures."""

import asyncio

import mlflow
import pytest

from festivalscope.core.errors import FetchError
from festivalscope.core.types import DetailRecord, ListingParams, SummaryRecord


@pytest.fixture(autouse=True)
def _disable_mlflow_tracing():
    """Disable MLflow tracing during tests so nothing is written to mlruns/."""
    mlflow.tracing.disable()
    yield
    mlflow.tracing.enable()


def _summary(identifier: str, title: str = "", region_code: str = "", **kwargs) -> SummaryRecord:
    return SummaryRecord(
        identifier=identifier,
        type_identifier=kwargs.pop("type_identifier", "15"),
        title=title or f"Festival {identifier}",
        region_code=region_code,
        **kwargs,
    )


@pytest.fixture
def make_summary():
    return _summary


@pytest.fixture
def make_detail():
    def _detail(identifier: str, period: str = "2024.07.10 ~ 2024.07.20", **kwargs) -> DetailRecord:
        return DetailRecord(identifier=identifier, period=period, **kwargs)
    return _detail


class FakeSource:
    """In-memory listing/search/detail source with scriptable failures.

    Page and detail fetches block on a gate when one is installed,
    so tests control when (and in which order) results arrive.
    """

    def __init__(self, pages=None, search_pages=None, details=None):
        self.pages: list[list[SummaryRecord]] = pages or []
        self.search_pages: dict[str, list[list[SummaryRecord]]] = search_pages or {}
        self.details: dict[str, DetailRecord] = details or {}
        self.page_calls: list[tuple[ListingParams, int]] = []
        self.search_calls: list[tuple[str, int]] = []
        self.detail_calls: list[str] = []
        self.fail_pages: set[int] = set()
        self.fail_details: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.page_gates: dict[int, asyncio.Event] = {}

    async def fetch_page(self, params: ListingParams, page_no: int) -> list[SummaryRecord]:
        self.page_calls.append((params, page_no))
        gate = self.page_gates.get(page_no)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if page_no in self.fail_pages:
            raise FetchError("/festivals/list", f"page {page_no} unavailable")
        if page_no > len(self.pages):
            return []
        return list(self.pages[page_no - 1])

    async def fetch_search_page(self, keyword: str, page_no: int) -> list[SummaryRecord]:
        self.search_calls.append((keyword, page_no))
        await asyncio.sleep(0)
        pages = self.search_pages.get(keyword, [])
        if page_no > len(pages):
            return []
        return list(pages[page_no - 1])

    async def fetch_detail(self, identifier: str, type_identifier: str) -> DetailRecord:
        self.detail_calls.append(identifier)
        gate = self.gates.get(identifier)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if identifier in self.fail_details or identifier not in self.details:
            raise FetchError("/festivals/detailIntro", f"no detail for {identifier}")
        return self.details[identifier]


@pytest.fixture
def fake_source_cls():
    return FakeSource
