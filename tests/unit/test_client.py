"""Tests for the festival gateway client (all HTTP calls mocked)."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from festivalscope.core.errors import FetchError
from festivalscope.core.types import ListingParams
from festivalscope.retrieval.client import FestivalApiClient, extract_items


def _envelope(items) -> dict:
    return {"data": {"response": {"body": {"items": items}}}}


def _mock_client(*payloads):
    """An AsyncMock httpx client returning the given JSON payloads in order."""
    responses = []
    for payload in payloads:
        resp = MagicMock()
        resp.json.return_value = payload
        resp.raise_for_status = MagicMock()
        responses.append(resp)

    mock_client = AsyncMock()
    mock_client.get.side_effect = responses
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestExtractItems:
    def test_list(self):
        assert extract_items(_envelope({"item": [{"a": 1}, {"b": 2}]}), "x") == [{"a": 1}, {"b": 2}]

    def test_single_object(self):
        assert extract_items(_envelope({"item": {"a": 1}}), "x") == [{"a": 1}]

    def test_empty_string_items(self):
        """TourAPI sends items: "" when there are no results."""
        assert extract_items(_envelope(""), "x") == []

    def test_missing_item(self):
        assert extract_items(_envelope({}), "x") == []

    def test_bad_shape_raises(self):
        with pytest.raises(FetchError, match="unexpected response shape"):
            extract_items({"data": None}, "x")


class TestFetchPage:
    @pytest.mark.asyncio
    async def test_normalizes_items(self):
        mock_client = _mock_client(_envelope({"item": [
            {"contentid": "1", "contenttypeid": "15", "title": "A", "areacode": "6"},
            {"contentid": "2", "contenttypeid": "15", "title": "B", "areacode": "1"},
        ]}))

        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            api = FestivalApiClient(base_url="http://gw/api", page_size=12)
            records = await api.fetch_page(ListingParams(event_start_date="20240701"), 2)

        assert [r.identifier for r in records] == ["1", "2"]
        path = mock_client.get.call_args.args[0]
        params = mock_client.get.call_args.kwargs["params"]
        assert path == "/festivals/list"
        assert params["pageNo"] == 2
        assert params["numOfRows"] == 12
        assert params["eventStartDate"] == "20240701"
        assert params["areaCode"] == ""

    @pytest.mark.asyncio
    async def test_no_more_results_is_empty(self):
        mock_client = _mock_client(_envelope(""))
        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            records = await FestivalApiClient(base_url="http://gw/api").fetch_page(ListingParams(), 9)
        assert records == []

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_error(self):
        mock_client = AsyncMock()
        mock_client.get.side_effect = httpx.ConnectError("refused")
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)

        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(FetchError, match="request failed"):
                await FestivalApiClient(base_url="http://gw/api").fetch_page(ListingParams(), 1)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_fetch_error(self):
        resp = MagicMock()
        resp.raise_for_status = MagicMock()
        resp.json.side_effect = ValueError("Expecting value")
        mock_client = AsyncMock()
        mock_client.get.return_value = resp
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)

        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(FetchError, match="invalid JSON"):
                await FestivalApiClient(base_url="http://gw/api").fetch_page(ListingParams(), 1)


class TestFetchSearchPage:
    @pytest.mark.asyncio
    async def test_sends_keyword(self):
        mock_client = _mock_client(_envelope({"item": {"contentid": "7", "title": "부산 불꽃축제"}}))
        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            records = await FestivalApiClient(base_url="http://gw/api").fetch_search_page("부산", 1)

        assert records[0].title == "부산 불꽃축제"
        assert mock_client.get.call_args.args[0] == "/festivals/search"
        assert mock_client.get.call_args.kwargs["params"]["keyword"] == "부산"


class TestFetchDetail:
    @pytest.mark.asyncio
    async def test_combines_intro_and_info(self):
        intro = _envelope({"item": [
            {"eventstartdate": "20240710", "eventenddate": "20240720", "eventplace": "해운대"},
        ]})
        info = _envelope({"item": [{"overview": "Fireworks over the beach"}]})

        def _respond(path, params=None):
            resp = MagicMock()
            resp.raise_for_status = MagicMock()
            resp.json.return_value = intro if path == "/festivals/detailIntro" else info
            return resp

        mock_client = AsyncMock()
        mock_client.get.side_effect = _respond
        mock_client.aclose = AsyncMock()

        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            async with FestivalApiClient(base_url="http://gw/api") as api:
                detail = await api.fetch_detail("7", "15")

        mock_client.aclose.assert_awaited_once()

        assert detail.identifier == "7"
        assert detail.period == "2024.07.10 ~ 2024.07.20"
        assert detail.venue == "해운대"
        assert detail.description == "Fireworks over the beach"

    @pytest.mark.asyncio
    async def test_missing_intro_raises(self):
        mock_client = _mock_client(_envelope(""), _envelope(""))
        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(FetchError, match="no detail"):
                await FestivalApiClient(base_url="http://gw/api").fetch_detail("7", "15")

    @pytest.mark.asyncio
    async def test_failed_info_keeps_period(self):
        """An overview outage still yields the period from detailIntro."""
        intro = _envelope({"item": {"eventstartdate": "20240710", "eventenddate": "20240720"}})

        def _respond(path, params=None):
            resp = MagicMock()
            if path == "/festivals/info":
                resp.raise_for_status.side_effect = httpx.HTTPStatusError(
                    "500 Internal Server Error", request=MagicMock(), response=MagicMock(),
                )
            else:
                resp.raise_for_status = MagicMock()
                resp.json.return_value = intro
            return resp

        mock_client = AsyncMock()
        mock_client.get.side_effect = _respond
        mock_client.aclose = AsyncMock()

        with patch("festivalscope.retrieval.client.httpx.AsyncClient", return_value=mock_client):
            async with FestivalApiClient(base_url="http://gw/api") as api:
                detail = await api.fetch_detail("7", "15")

        assert detail.period == "2024.07.10 ~ 2024.07.20"
        assert detail.end_date == "20240720"
        assert detail.description == ""
