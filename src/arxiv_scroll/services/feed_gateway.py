"""Single-round-trip access to the arXiv API with structured failures."""

from __future__ import annotations

import asyncio
import logging

import httpx

from arxiv_scroll.models import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SORT_BY,
    DEFAULT_SORT_ORDER,
    FetchFailure,
    FetchFailureReason,
    PaperRecord,
)
from arxiv_scroll.parsing import parse_feed

logger = logging.getLogger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"
DEFAULT_USER_AGENT = "arxiv-scroll/1.0"


async def _get(
    client: httpx.AsyncClient | None,
    params: dict[str, str | int],
    headers: dict[str, str],
    timeout_seconds: float,
) -> httpx.Response:
    if client is not None:
        return await client.get(
            ARXIV_API_URL,
            params=params,
            headers=headers,
            timeout=timeout_seconds,
        )
    async with httpx.AsyncClient() as tmp_client:
        return await tmp_client.get(
            ARXIV_API_URL,
            params=params,
            headers=headers,
            timeout=timeout_seconds,
        )


async def fetch_page(
    *,
    client: httpx.AsyncClient | None,
    query: str,
    start: int,
    max_results: int,
    sort_by: str = DEFAULT_SORT_BY,
    sort_order: str = DEFAULT_SORT_ORDER,
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> list[PaperRecord]:
    """Fetch one page of arXiv API results and translate it to records.

    The timeout is a hard deadline on the whole round trip. An empty list is
    a valid "nothing at this offset" answer, distinct from failure.

    Raises:
        FetchFailure: on timeout, transport error, non-success status, empty
            body, or an unparseable document.
        ValueError: if ``start`` is negative or ``max_results`` is not positive.
    """
    if start < 0:
        raise ValueError(f"start must be >= 0, got {start}")
    if max_results <= 0:
        raise ValueError(f"max_results must be > 0, got {max_results}")

    params: dict[str, str | int] = {
        "search_query": query,
        "start": start,
        "max_results": max_results,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }
    headers = {
        "User-Agent": user_agent,
        "Accept": "application/atom+xml",
        "Cache-Control": "no-cache",
    }

    try:
        response = await asyncio.wait_for(
            _get(client, params, headers, timeout_seconds),
            timeout=timeout_seconds,
        )
    except (TimeoutError, httpx.TimeoutException) as exc:
        raise FetchFailure(
            FetchFailureReason.TIMEOUT,
            f"arXiv API did not answer within {timeout_seconds}s",
        ) from exc
    except httpx.HTTPError as exc:
        raise FetchFailure(
            FetchFailureReason.NETWORK_ERROR,
            f"arXiv API request failed: {exc}",
        ) from exc

    if not response.is_success:
        raise FetchFailure(
            FetchFailureReason.UPSTREAM_ERROR,
            f"arXiv API returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    body = response.text
    if not body.strip():
        raise FetchFailure(FetchFailureReason.EMPTY_BODY, "Empty response from arXiv API")

    try:
        papers = parse_feed(body)
    except ValueError as exc:
        raise FetchFailure(FetchFailureReason.PARSE_ERROR, str(exc)) from exc

    logger.debug("Fetched %d papers at start=%d for %r", len(papers), start, query)
    return papers


__all__ = [
    "ARXIV_API_URL",
    "DEFAULT_USER_AGENT",
    "fetch_page",
]
