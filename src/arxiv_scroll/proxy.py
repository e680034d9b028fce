"""JSON boundary between the feed and a consuming client.

``handle_proxy_request`` takes the query-string parameters a browser client
would send and returns the JSON-ready payload it expects back::

    {"papers": [...]}                                         success
    {"papers": [], "error": ..., "message": ...}              total failure
    {"papers": [...], "error": ..., "message": ...,
     "usedFallback": true}                                    placeholder data

``parse_proxy_payload`` is the consuming side of the same contract.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from arxiv_scroll.categories import resolve_category_tag
from arxiv_scroll.models import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SORT_BY,
    DEFAULT_SORT_ORDER,
    MAX_BATCH_SIZE,
    FetchFailure,
    FetchFailureReason,
    PageResult,
    PaperRecord,
    ResultOrigin,
)
from arxiv_scroll.services.interfaces import DefaultFeedGateway
from arxiv_scroll.services.retry import RetryController

logger = logging.getLogger(__name__)

PROXY_DEFAULT_QUERY = "cat:cs.*"
PROXY_ERROR = "Failed to fetch papers from arXiv"
INVALID_REQUEST_ERROR = "Invalid request"


def parse_subcategories(raw: str | None) -> list[str]:
    """Split a comma-separated tag list into category codes, in order."""
    if not raw:
        return []
    resolved = (resolve_category_tag(tag) for tag in raw.split(","))
    return list(dict.fromkeys(code for code in resolved if code))


def build_proxy_query(query: str | None, subcategories: list[str]) -> str:
    """Subcategories win over the free query; fall back to all of cs.*."""
    if subcategories:
        return " OR ".join(f"cat:{code}" for code in subcategories)
    return (query or "").strip() or PROXY_DEFAULT_QUERY


def filter_by_subcategories(
    papers: list[PaperRecord] | tuple[PaperRecord, ...], subcategories: list[str]
) -> list[PaperRecord]:
    """Keep papers with a category containing one of ``subcategories``."""
    wanted = [code.lower() for code in subcategories]
    return [
        paper
        for paper in papers
        if any(pref in category.lower() for category in paper.categories for pref in wanted)
    ]


def filter_cs_papers(papers: list[PaperRecord] | tuple[PaperRecord, ...]) -> list[PaperRecord]:
    return [p for p in papers if any(c.startswith("cs.") for c in p.categories)]


def _int_param(params: Mapping[str, str], key: str, default: int) -> int:
    raw = params.get(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


def _error_payload(error: str, message: str) -> dict[str, Any]:
    return {"papers": [], "error": error, "message": message}


async def handle_proxy_request(
    params: Mapping[str, str],
    *,
    client: httpx.AsyncClient | None = None,
    retry: bool = False,
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT,
) -> dict[str, Any]:
    """Serve one page request and return the JSON-ready payload.

    Without ``retry`` a single upstream round trip is made and any failure
    yields the error payload. With ``retry`` the request goes through the
    ``RetryController``, so exhausted retries yield placeholder papers and
    ``usedFallback``. The cache-busting ``_`` parameter is ignored.
    """
    try:
        start = max(0, _int_param(params, "start", 0))
        max_results = _int_param(params, "maxResults", DEFAULT_BATCH_SIZE)
    except ValueError as exc:
        logger.warning("Rejected proxy request: %s", exc)
        return _error_payload(INVALID_REQUEST_ERROR, str(exc))
    max_results = max(1, min(max_results, MAX_BATCH_SIZE))

    subcategories = parse_subcategories(params.get("subcategories"))
    query = build_proxy_query(params.get("query"), subcategories)
    default_query = not subcategories and query == PROXY_DEFAULT_QUERY

    gateway = DefaultFeedGateway(
        client=client,
        sort_by=params.get("sortBy") or DEFAULT_SORT_BY,
        sort_order=params.get("sortOrder") or DEFAULT_SORT_ORDER,
        timeout_seconds=timeout_seconds,
    )
    logger.debug("Proxy request query=%r start=%d maxResults=%d", query, start, max_results)

    if retry:
        result = await RetryController(gateway).fetch(query, start, max_results)
        if result.used_fallback:
            return {
                "papers": [paper.to_dict() for paper in result.papers],
                "error": PROXY_ERROR,
                "message": result.message,
                "usedFallback": True,
            }
        papers = list(result.papers)
    else:
        try:
            papers = await gateway.fetch_page(query=query, start=start, max_results=max_results)
        except FetchFailure as exc:
            logger.warning("Proxy fetch failed (%s): %s", exc.reason.value, exc.message)
            return _error_payload(PROXY_ERROR, exc.message)

    if subcategories:
        papers = filter_by_subcategories(papers, subcategories)
    elif default_query:
        papers = filter_cs_papers(papers)
    return {"papers": [paper.to_dict() for paper in papers]}


def parse_proxy_payload(payload: Any, *, offset: int = 0) -> PageResult:
    """Turn a proxy payload back into a ``PageResult``.

    Malformed papers are dropped. A payload carrying ``error`` without
    ``usedFallback`` is reported as an upstream failure with no papers.
    """
    if not isinstance(payload, Mapping):
        return PageResult(
            papers=(),
            origin=ResultOrigin.UPSTREAM,
            offset=offset,
            failure=FetchFailureReason.PARSE_ERROR,
            message="Proxy payload is not a JSON object",
        )

    raw_papers = payload.get("papers")
    records: list[PaperRecord] = []
    if isinstance(raw_papers, list):
        for item in raw_papers:
            record = PaperRecord.from_dict(item)
            if record is not None:
                records.append(record)

    message = payload.get("message")
    message = message if isinstance(message, str) else ""
    if payload.get("usedFallback") is True:
        return PageResult(
            papers=tuple(records),
            origin=ResultOrigin.PLACEHOLDER,
            offset=offset,
            failure=FetchFailureReason.UPSTREAM_ERROR,
            message=message,
        )
    if payload.get("error"):
        return PageResult(
            papers=(),
            origin=ResultOrigin.UPSTREAM,
            offset=offset,
            failure=FetchFailureReason.UPSTREAM_ERROR,
            message=message or str(payload.get("error")),
        )
    return PageResult(papers=tuple(records), origin=ResultOrigin.UPSTREAM, offset=offset)


__all__ = [
    "PROXY_DEFAULT_QUERY",
    "PROXY_ERROR",
    "build_proxy_query",
    "filter_by_subcategories",
    "filter_cs_papers",
    "handle_proxy_request",
    "parse_proxy_payload",
    "parse_subcategories",
]
