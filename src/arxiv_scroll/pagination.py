"""Incremental pagination over the paper feed.

``PaginationEngine`` owns the accumulated results for one filter scope, the
fetch cursor, cross-page de-duplication, and end-of-results detection. The
display layer only sees ``DisplayState`` snapshots and calls ``load_more``.

State per scope::

    Idle --load_more/set_scope--> Loading --page settles--> Idle

``has_more`` gates ``load_more`` independently of the loading state. It turns
false after ``empty_page_limit`` consecutive pages that add no new upstream
records; a single empty page is only a gap in a sparse region of the feed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from arxiv_scroll.models import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_LOW_WATER_MARK,
    DEFAULT_MAX_REOPENS,
    DEFAULT_MIN_LOAD_INTERVAL,
    EMPTY_PAGE_LIMIT,
    UNDERFILL_JUMP_PAGES,
    DisplayState,
    FilterScope,
    PageResult,
    PaperRecord,
    ResultOrigin,
    UserConfig,
)
from arxiv_scroll.query import build_search_query, normalize_scope
from arxiv_scroll.services.interfaces import PageSource

logger = logging.getLogger(__name__)

DisplayListener = Callable[[DisplayState], None]


class PaginationEngine:
    """Accumulate feed pages for the active filter scope."""

    def __init__(
        self,
        source: PageSource,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        min_interval_seconds: float = DEFAULT_MIN_LOAD_INTERVAL,
        empty_page_limit: int = EMPTY_PAGE_LIMIT,
        low_water_mark: int = DEFAULT_LOW_WATER_MARK,
        max_reopens: int = DEFAULT_MAX_REOPENS,
        underfill_jump_pages: int = UNDERFILL_JUMP_PAGES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        self._source = source
        self._batch_size = batch_size
        self._min_interval = min_interval_seconds
        self._empty_page_limit = max(1, empty_page_limit)
        self._low_water_mark = low_water_mark
        self._max_reopens = max(0, max_reopens)
        self._underfill_jump_pages = max(1, underfill_jump_pages)
        self._clock = clock

        self._scope = FilterScope()
        self._query = build_search_query(self._scope)
        self._started = False
        self._generation = 0

        self._papers: list[PaperRecord] = []
        self._seen_ids: set[str] = set()
        self._upstream_count = 0
        self._cursor = 0
        self._furthest_offset = 0
        self._has_more = True
        self._loading = False
        self._empty_streak = 0
        self._reopens = 0
        self._last_requested_cursor: int | None = None
        self._last_fetch_started: float | None = None

        self._listeners: list[DisplayListener] = []
        self._tasks: set[asyncio.Task[bool]] = set()

    @classmethod
    def from_config(
        cls,
        source: PageSource,
        config: UserConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> PaginationEngine:
        """Build an engine using the paging values from user config."""
        return cls(
            source,
            batch_size=config.batch_size,
            min_interval_seconds=config.min_load_interval_seconds,
            low_water_mark=config.low_water_mark,
            max_reopens=config.max_underfill_reopens,
            clock=clock,
        )

    # ── Read-only state ──────────────────────────────────────────────────

    @property
    def papers(self) -> tuple[PaperRecord, ...]:
        return tuple(self._papers)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def scope(self) -> FilterScope:
        return self._scope

    @property
    def query(self) -> str:
        return self._query

    @property
    def has_placeholders(self) -> bool:
        return self._upstream_count < len(self._papers)

    def snapshot(self) -> DisplayState:
        """Return the display contract for the current state."""
        return DisplayState(
            papers=tuple(self._papers),
            loading=self._loading,
            has_more=self._has_more,
        )

    # ── Listeners ────────────────────────────────────────────────────────

    def subscribe(self, listener: DisplayListener) -> None:
        """Call ``listener`` with a fresh snapshot on every state change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: DisplayListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Display listener %r failed", listener)

    # ── Scope changes ────────────────────────────────────────────────────

    def _reset(self, scope: FilterScope) -> None:
        self._generation += 1
        self._scope = scope
        self._query = build_search_query(scope)
        self._started = True
        self._papers = []
        self._seen_ids = set()
        self._upstream_count = 0
        self._cursor = 0
        self._furthest_offset = 0
        self._has_more = True
        self._loading = False
        self._empty_streak = 0
        self._reopens = 0
        self._last_requested_cursor = None
        self._last_fetch_started = None
        logger.debug("Scope reset to %r (generation %d)", self._query, self._generation)
        self._notify()

    async def set_scope(
        self,
        search_text: str = "",
        categories: Iterable[str] = (),
        *,
        force: bool = False,
    ) -> bool:
        """Switch to a new filter scope and fetch its first page.

        Returns False without doing anything when the normalized scope equals
        the active one (unless ``force`` is set). A fetch still in flight for
        the previous scope is left to finish; its result is discarded.

        Raises:
            ValueError: if the filter text cannot be encoded.
        """
        scope = normalize_scope(search_text, categories)
        if self._started and scope == self._scope and not force:
            return False
        self._reset(scope)
        await self._fetch_page()
        return True

    async def refresh(self) -> None:
        """Reset the active scope and refetch from offset 0."""
        self._reset(self._scope)
        await self._fetch_page()

    # ── Loading ──────────────────────────────────────────────────────────

    def _can_load_more(self) -> bool:
        if self._loading or not self._has_more:
            return False
        if self._last_fetch_started is not None:
            elapsed = self._clock() - self._last_fetch_started
            if elapsed < self._min_interval:
                logger.debug("load_more ignored, %.2fs since last fetch", elapsed)
                return False
        # Settling always moves the cursor past the requested offset, so this
        # only trips if that invariant is ever broken.
        if self._last_requested_cursor == self._cursor:
            logger.debug("load_more ignored, start=%d already requested", self._cursor)
            return False
        return True

    async def load_more(self) -> bool:
        """Fetch the next page if allowed. Returns True when a fetch ran.

        A no-op while loading, after end of results, within the minimum
        spacing since the previous fetch started, or when the current cursor
        was already requested.
        """
        if not self._can_load_more():
            return False
        await self._fetch_page()
        return True

    def request_load_more(self) -> asyncio.Task[bool] | None:
        """Schedule ``load_more`` on the running loop for event-driven callers."""
        if not self._can_load_more():
            return None
        task = asyncio.get_running_loop().create_task(self.load_more())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        """Cancel scheduled load_more tasks."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fetch_page(self) -> None:
        generation = self._generation
        start = self._cursor
        self._loading = True
        self._last_requested_cursor = start
        self._last_fetch_started = self._clock()
        self._furthest_offset = max(self._furthest_offset, start)

        result: PageResult | None = None
        try:
            self._notify()
            result = await self._source.fetch(self._query, start, self._batch_size)
        except Exception:
            logger.exception("Page fetch at start=%d failed unexpectedly", start)
        finally:
            if generation == self._generation:
                self._loading = False
                self._cursor = start + self._batch_size

        if generation != self._generation:
            logger.debug("Discarding page at start=%d from a superseded scope", start)
            return

        self._apply_result(result)
        self._notify()

    def _apply_result(self, result: PageResult | None) -> None:
        new_upstream = 0
        if result is not None:
            self._furthest_offset = max(self._furthest_offset, result.offset)
            for paper in result.papers:
                if paper.id in self._seen_ids:
                    continue
                self._seen_ids.add(paper.id)
                self._papers.append(paper)
                if paper.origin is ResultOrigin.UPSTREAM:
                    new_upstream += 1
            self._upstream_count += new_upstream
            if result.used_fallback:
                logger.info(
                    "Page at start=%d served placeholder data (%s)",
                    result.offset,
                    result.message,
                )

        if new_upstream:
            self._empty_streak = 0
            return

        self._empty_streak += 1
        logger.debug(
            "Page added no new papers (%d/%d in a row)",
            self._empty_streak,
            self._empty_page_limit,
        )
        if self._empty_streak >= self._empty_page_limit:
            self._has_more = False
            logger.info(
                "End of results for %r after %d empty pages (%d papers)",
                self._query,
                self._empty_streak,
                self._upstream_count,
            )
            self._maybe_reopen()

    def _maybe_reopen(self) -> None:
        """Reopen pagination when end-of-results came suspiciously early.

        A capped heuristic for sparse regions of the feed, not a guarantee.
        """
        if self._upstream_count >= self._low_water_mark:
            return
        if self._reopens >= self._max_reopens:
            return
        self._reopens += 1
        self._has_more = True
        self._empty_streak = 0
        jump = self._underfill_jump_pages * self._batch_size
        self._cursor = max(self._cursor, self._furthest_offset + self._batch_size) + jump
        logger.info(
            "Only %d papers at end of results, reopening at start=%d (%d/%d)",
            self._upstream_count,
            self._cursor,
            self._reopens,
            self._max_reopens,
        )


__all__ = [
    "DisplayListener",
    "PaginationEngine",
]
