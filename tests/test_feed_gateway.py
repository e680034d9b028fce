"""Tests for the single-round-trip feed gateway."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from arxiv_scroll.models import FetchFailure, FetchFailureReason
from arxiv_scroll.services.feed_gateway import ARXIV_API_URL, DEFAULT_USER_AGENT, fetch_page


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _fetch(client: httpx.AsyncClient, **kwargs):
    params = {"query": "cat:cs.LG", "start": 0, "max_results": 50}
    params.update(kwargs)
    return await fetch_page(client=client, **params)


@pytest.mark.asyncio
async def test_sends_query_parameters(make_feed) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=make_feed({"id": "http://arxiv.org/abs/1"}))

    async with _client(handler) as client:
        papers = await _fetch(client, start=100, max_results=25)

    assert [p.id for p in papers] == ["http://arxiv.org/abs/1"]
    request = seen[0]
    assert str(request.url).startswith(ARXIV_API_URL)
    assert request.url.params["search_query"] == "cat:cs.LG"
    assert request.url.params["start"] == "100"
    assert request.url.params["max_results"] == "25"
    assert request.url.params["sortBy"] == "submittedDate"
    assert request.url.params["sortOrder"] == "descending"
    assert request.headers["User-Agent"] == DEFAULT_USER_AGENT


@pytest.mark.asyncio
async def test_empty_feed_is_not_a_failure(make_feed) -> None:
    async with _client(lambda r: httpx.Response(200, text=make_feed())) as client:
        assert await _fetch(client) == []


@pytest.mark.asyncio
async def test_http_error_status_is_upstream_error() -> None:
    async with _client(lambda r: httpx.Response(503, text="busy")) as client:
        with pytest.raises(FetchFailure) as exc_info:
            await _fetch(client)
    assert exc_info.value.reason is FetchFailureReason.UPSTREAM_ERROR
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_blank_body_is_empty_body() -> None:
    async with _client(lambda r: httpx.Response(200, text="  \n")) as client:
        with pytest.raises(FetchFailure) as exc_info:
            await _fetch(client)
    assert exc_info.value.reason is FetchFailureReason.EMPTY_BODY


@pytest.mark.asyncio
async def test_garbage_body_is_parse_error() -> None:
    async with _client(lambda r: httpx.Response(200, text="<feed><oops")) as client:
        with pytest.raises(FetchFailure) as exc_info:
            await _fetch(client)
    assert exc_info.value.reason is FetchFailureReason.PARSE_ERROR


@pytest.mark.asyncio
async def test_transport_error_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(FetchFailure) as exc_info:
            await _fetch(client)
    assert exc_info.value.reason is FetchFailureReason.NETWORK_ERROR


@pytest.mark.asyncio
async def test_httpx_timeout_is_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with _client(handler) as client:
        with pytest.raises(FetchFailure) as exc_info:
            await _fetch(client)
    assert exc_info.value.reason is FetchFailureReason.TIMEOUT


@pytest.mark.asyncio
async def test_deadline_is_timeout() -> None:
    client = SimpleNamespace(get=AsyncMock(side_effect=TimeoutError()))
    with pytest.raises(FetchFailure) as exc_info:
        await _fetch(client, timeout_seconds=0.01)
    assert exc_info.value.reason is FetchFailureReason.TIMEOUT


@pytest.mark.asyncio
async def test_uses_temporary_client_when_none_given(make_feed) -> None:
    response = httpx.Response(200, text=make_feed(), request=httpx.Request("GET", ARXIV_API_URL))
    tmp_client = SimpleNamespace(get=AsyncMock(return_value=response))

    with patch("arxiv_scroll.services.feed_gateway.httpx.AsyncClient") as client_cls:
        client_cls.return_value.__aenter__ = AsyncMock(return_value=tmp_client)
        client_cls.return_value.__aexit__ = AsyncMock(return_value=None)
        papers = await fetch_page(client=None, query="q", start=0, max_results=5)

    assert papers == []
    tmp_client.get.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(("start", "max_results"), [(-1, 10), (0, 0)])
async def test_rejects_invalid_paging(start: int, max_results: int) -> None:
    with pytest.raises(ValueError):
        await fetch_page(client=None, query="q", start=start, max_results=max_results)
