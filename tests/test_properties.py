"""Property-based tests using Hypothesis.

Verifies pagination invariants (dedup, cursor monotonicity, end-of-results
convergence) and round-trip properties of query and config helpers.
"""

from __future__ import annotations

import asyncio

import hypothesis.strategies as st
from hypothesis import given, settings

from arxiv_scroll.config import _config_to_dict, _dict_to_config
from arxiv_scroll.models import PageResult, PaperRecord, ResultOrigin, UserConfig
from arxiv_scroll.pagination import PaginationEngine
from arxiv_scroll.query import build_search_query, normalize_scope

# ── Hypothesis profiles ─────────────────────────────────────────────
settings.register_profile("ci", max_examples=50, deadline=None)
settings.register_profile("dev", max_examples=200, deadline=None)
settings.load_profile("ci")

pages_strategy = st.lists(
    st.lists(st.integers(min_value=0, max_value=30), max_size=8),
    min_size=1,
    max_size=12,
)


class _Pages:
    def __init__(self, pages: list[list[int]]) -> None:
        self.pages = list(pages)

    async def fetch(self, query: str, start: int, max_results: int) -> PageResult:
        ids = self.pages.pop(0) if self.pages else []
        return PageResult(
            papers=tuple(PaperRecord(id=f"p{n}") for n in ids),
            origin=ResultOrigin.UPSTREAM,
            offset=start,
        )


def _drive(pages: list[list[int]]) -> tuple[PaginationEngine, list[int]]:
    """Fetch every scripted page and record the cursor after each settle."""
    clock = iter(range(0, 10_000, 10))
    engine = PaginationEngine(
        _Pages(pages), batch_size=10, low_water_mark=0, clock=lambda: next(clock)
    )

    async def run() -> list[int]:
        await engine.set_scope()
        cursors = [engine.cursor]
        for _ in range(len(pages) - 1):
            if not await engine.load_more():
                break
            cursors.append(engine.cursor)
        return cursors

    return engine, asyncio.run(run())


@given(pages_strategy)
def test_dedup_keeps_first_seen_order(pages: list[list[int]]) -> None:
    engine, _ = _drive(pages)
    ids = [p.id for p in engine.papers]
    assert len(ids) == len(set(ids))
    expected: list[str] = []
    fetched = pages[: len(_drive(pages)[1])]
    for page in fetched:
        for n in page:
            if f"p{n}" not in expected:
                expected.append(f"p{n}")
    assert ids == expected


@given(pages_strategy)
def test_cursor_advances_by_batch_per_fetch(pages: list[list[int]]) -> None:
    _, cursors = _drive(pages)
    assert cursors == [10 * (i + 1) for i in range(len(cursors))]


@given(st.lists(st.integers(min_value=0, max_value=5), min_size=1, max_size=5))
def test_repeats_end_results_within_three_fetches(first_page: list[int]) -> None:
    repeats = [first_page] * 3
    engine, cursors = _drive([first_page, *repeats, [99]])
    assert engine.has_more is False
    assert len(cursors) == 4


@given(st.text(max_size=40), st.lists(st.sampled_from(["ml", "cv", "cs.AI", "math.CO"])))
def test_normalize_scope_is_idempotent(text: str, categories: list[str]) -> None:
    scope = normalize_scope(text, categories)
    assert normalize_scope(scope.search_text, scope.categories) == scope
    assert build_search_query(scope)


@given(
    st.integers(min_value=-10, max_value=500),
    st.integers(min_value=0, max_value=100),
    st.booleans(),
)
def test_config_round_trip_is_stable(batch_size: int, timeout: int, preview: bool) -> None:
    config = _dict_to_config(
        {
            "batch_size": batch_size,
            "request_timeout_seconds": timeout,
            "show_abstract_preview": preview,
        }
    )
    assert 1 <= config.batch_size <= 200
    assert 15 <= config.request_timeout_seconds <= 60
    assert _dict_to_config(_config_to_dict(config)) == config
    assert isinstance(config, UserConfig)
