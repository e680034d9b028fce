"""Bounded retry, backoff, and placeholder fallback around the feed gateway.

``RetryController.fetch`` never raises for feed problems: callers always get
a ``PageResult``, whose ``origin`` tells real data from placeholder data.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from arxiv_scroll.models import (
    DEFAULT_MAX_ATTEMPTS,
    PLACEHOLDER_BATCH_SIZE,
    FetchFailure,
    FetchFailureReason,
    PageResult,
    PaperRecord,
    ResultOrigin,
)

if TYPE_CHECKING:
    from arxiv_scroll.services.interfaces import FeedGateway

logger = logging.getLogger(__name__)

INITIAL_BACKOFF = 1.0  # seconds, doubles each retry
EMPTY_PAGE_WAIT = 1.0  # seconds between re-probes of an empty page
MAX_RANDOM_JUMP = 100

_PLACEHOLDER_TOPICS = (
    "Deep Learning",
    "Machine Learning",
    "Computer Vision",
    "Natural Language Processing",
    "Reinforcement Learning",
)
_PLACEHOLDER_CATEGORIES = ("cs.CV", "cs.LG", "cs.AI")


def backoff_delay(attempt: int, base_seconds: float = INITIAL_BACKOFF) -> float:
    """Return the wait after the given 1-based failed attempt (1, 2, 4, 8, ...)."""
    return base_seconds * (2 ** max(0, attempt - 1))


def build_placeholder_batch(
    start: int, size: int = PLACEHOLDER_BATCH_SIZE
) -> tuple[PaperRecord, ...]:
    """Generate a deterministic placeholder batch for an offset.

    The same ``start`` always yields the same ids, so repeated fallbacks at
    one offset deduplicate instead of piling up.
    """
    records: list[PaperRecord] = []
    for i in range(size):
        index = start + i
        topic = _PLACEHOLDER_TOPICS[index % len(_PLACEHOLDER_TOPICS)]
        records.append(
            PaperRecord(
                id=f"placeholder-{index}",
                title=f"Sample Paper {index}: {topic} Research",
                authors=(f"Author {index * 2 + 1}", f"Author {index * 2 + 2}"),
                abstract=(
                    f"Placeholder entry {index}, shown because papers could not "
                    "be fetched from the arXiv API."
                ),
                categories=_PLACEHOLDER_CATEGORIES[: (index % 3) + 1],
                origin=ResultOrigin.PLACEHOLDER,
            )
        )
    return tuple(records)


class RetryController:
    """Wrap a FeedGateway with the page-fetch resilience policy.

    - up to ``max_attempts`` gateway calls per logical page request
    - exponential backoff after failures, fixed wait after empty pages
    - each retry re-probes a randomized offset further into the feed
    - timeout or exhaustion falls back to a placeholder batch
    """

    def __init__(
        self,
        gateway: FeedGateway,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_backoff_seconds: float = INITIAL_BACKOFF,
        empty_page_wait_seconds: float = EMPTY_PAGE_WAIT,
        placeholder_size: int = PLACEHOLDER_BATCH_SIZE,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._gateway = gateway
        self._max_attempts = max_attempts
        self._base_backoff = base_backoff_seconds
        self._empty_page_wait = empty_page_wait_seconds
        self._placeholder_size = placeholder_size
        self._sleep = sleep if sleep is not None else asyncio.sleep
        self._rng = rng or random.Random()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _reprobe_offset(
        self, offset: int, page_size: int, reason: FetchFailureReason | None
    ) -> int:
        """Pick the next offset to probe after a failed or empty attempt."""
        if reason is FetchFailureReason.EMPTY_BODY:
            return offset + self._rng.randint(1, MAX_RANDOM_JUMP)
        return offset + page_size + self._rng.randrange(max(1, page_size))

    def _placeholder(
        self,
        start: int,
        attempts: int,
        failure: FetchFailureReason | None,
        message: str,
    ) -> PageResult:
        return PageResult(
            papers=build_placeholder_batch(start, self._placeholder_size),
            origin=ResultOrigin.PLACEHOLDER,
            offset=start,
            attempts=attempts,
            failure=failure,
            message=message or "Failed to fetch papers from arXiv",
        )

    async def _fetch_once(self, query: str, offset: int, max_results: int) -> list[PaperRecord]:
        """Call the gateway once, reporting any unexpected error as a network failure."""
        try:
            return await self._gateway.fetch_page(
                query=query,
                start=offset,
                max_results=max_results,
            )
        except FetchFailure:
            raise
        except Exception as e:
            logger.exception("Unexpected error from feed gateway at start=%d", offset)
            raise FetchFailure(
                FetchFailureReason.NETWORK_ERROR, f"{type(e).__name__}: {e}"
            ) from e

    async def fetch(self, query: str, start: int, max_results: int) -> PageResult:
        """Get one logical page starting at ``start``."""
        offset = start
        attempt = 0
        last_failure: FetchFailureReason | None = None
        last_message = ""

        while attempt < self._max_attempts:
            try:
                papers = await self._fetch_once(query, offset, max_results)
            except FetchFailure as exc:
                attempt += 1
                last_failure = exc.reason
                last_message = exc.message
                if exc.reason is FetchFailureReason.TIMEOUT:
                    logger.warning(
                        "Feed request timed out at start=%d, using placeholder data", offset
                    )
                    return self._placeholder(start, attempt, last_failure, last_message)
                if attempt >= self._max_attempts:
                    break
                delay = backoff_delay(attempt, self._base_backoff)
                logger.info(
                    "Feed %s at start=%d, retrying in %.1fs (attempt %d/%d)",
                    exc.reason.value,
                    offset,
                    delay,
                    attempt,
                    self._max_attempts,
                )
                await self._sleep(delay)
                offset = self._reprobe_offset(offset, max_results, exc.reason)
                continue

            attempt += 1
            if papers:
                return PageResult(
                    papers=tuple(papers),
                    origin=ResultOrigin.UPSTREAM,
                    offset=offset,
                    attempts=attempt,
                )
            if attempt >= self._max_attempts:
                logger.info("No papers after %d probes from start=%d", attempt, start)
                return PageResult(
                    papers=(),
                    origin=ResultOrigin.UPSTREAM,
                    offset=offset,
                    attempts=attempt,
                )
            logger.info(
                "No papers at start=%d, re-probing further ahead (attempt %d/%d)",
                offset,
                attempt,
                self._max_attempts,
            )
            await self._sleep(self._empty_page_wait)
            offset = self._reprobe_offset(offset, max_results, None)

        logger.warning(
            "Feed request failed after %d attempts (%s), using placeholder data",
            attempt,
            last_message,
        )
        return self._placeholder(start, attempt, last_failure, last_message)


__all__ = [
    "EMPTY_PAGE_WAIT",
    "INITIAL_BACKOFF",
    "MAX_RANDOM_JUMP",
    "RetryController",
    "backoff_delay",
    "build_placeholder_batch",
]
