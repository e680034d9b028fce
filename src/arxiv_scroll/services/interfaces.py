"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from arxiv_scroll.models import PageResult, PaperRecord, UserConfig
from arxiv_scroll.services import feed_gateway as _feed_gateway
from arxiv_scroll.services.retry import RetryController


@runtime_checkable
class FeedGateway(Protocol):
    """Interface for one round trip to the paper feed."""

    async def fetch_page(
        self,
        *,
        query: str,
        start: int,
        max_results: int,
    ) -> list[PaperRecord]:
        """Fetch one page; raise FetchFailure on failure."""
        ...


@runtime_checkable
class PageSource(Protocol):
    """Interface for a logical page request that always yields a result."""

    async def fetch(self, query: str, start: int, max_results: int) -> PageResult:
        """Fetch one page, degrading to placeholder data instead of raising."""
        ...


class DefaultFeedGateway:
    """Default adapter that delegates to the function-based feed gateway."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None,
        sort_by: str,
        sort_order: str,
        timeout_seconds: float,
        user_agent: str = _feed_gateway.DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client
        self._sort_by = sort_by
        self._sort_order = sort_order
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent

    async def fetch_page(
        self,
        *,
        query: str,
        start: int,
        max_results: int,
    ) -> list[PaperRecord]:
        return await _feed_gateway.fetch_page(
            client=self._client,
            query=query,
            start=start,
            max_results=max_results,
            sort_by=self._sort_by,
            sort_order=self._sort_order,
            timeout_seconds=self._timeout_seconds,
            user_agent=self._user_agent,
        )


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    pages: PageSource


def build_default_app_services(
    config: UserConfig,
    client: httpx.AsyncClient | None = None,
) -> AppServices:
    """Build the default gateway and retry controller from user config."""
    gateway = DefaultFeedGateway(
        client=client,
        sort_by=config.sort_by,
        sort_order=config.sort_order,
        timeout_seconds=config.request_timeout_seconds,
    )
    return AppServices(
        pages=RetryController(gateway, max_attempts=config.max_attempts),
    )


__all__ = [
    "AppServices",
    "DefaultFeedGateway",
    "FeedGateway",
    "PageSource",
    "build_default_app_services",
]
