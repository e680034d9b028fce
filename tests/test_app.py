"""Tests for the Textual app using run_test() + pilot."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from textual.widgets import Input, ListView

from arxiv_scroll.app import PaperScrollApp, parse_category_input, should_load_more
from arxiv_scroll.modals import CategoryPickerModal, PaperDetailsScreen
from arxiv_scroll.models import PageResult, ResultOrigin, UserConfig
from arxiv_scroll.preferences import MemoryStorage, PreferenceStore
from arxiv_scroll.services.interfaces import AppServices
from arxiv_scroll.services.retry import build_placeholder_batch


@pytest.mark.parametrize(
    ("index", "total", "expected"),
    [
        (0, 0, True),
        (None, 3, True),
        (None, 50, False),
        (10, 50, False),
        (45, 50, True),
        (49, 50, True),
    ],
)
def test_should_load_more(index, total, expected) -> None:
    assert should_load_more(index, total, threshold=5) is expected


def test_parse_category_input() -> None:
    assert parse_category_input(" ml, cs.CV ,, ") == ["ml", "cs.CV"]


class _Pages:
    def __init__(self, result_for) -> None:
        self.result_for = result_for
        self.calls: list[tuple[str, int]] = []

    async def fetch(self, query: str, start: int, max_results: int) -> PageResult:
        self.calls.append((query, start))
        return self.result_for(start)


def _make_app(
    make_page, *, result_for=None, store=None, **kwargs
) -> tuple[PaperScrollApp, _Pages]:
    if result_for is None:

        def result_for(start: int) -> PageResult:
            return make_page([1, 2, 3], offset=start) if start == 0 else make_page([])

    pages = _Pages(result_for)
    app = PaperScrollApp(
        store=store if store is not None else PreferenceStore.open(MemoryStorage()),
        services=AppServices(pages=pages),
        poll_interval=60.0,
        **kwargs,
    )
    return app, pages


async def _wait_for(pilot, predicate, timeout: float = 2.0) -> None:
    end = asyncio.get_running_loop().time() + timeout
    while not predicate() and asyncio.get_running_loop().time() < end:
        await pilot.pause(0.05)


@pytest.mark.asyncio
async def test_first_page_renders_cards(make_page) -> None:
    app, pages = _make_app(make_page, categories=["ml"])
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 3)
        assert len(browse.children) == 3
        assert pages.calls[0] == ("cat:cs.LG", 0)
        assert app.query_one("#category-input", Input).value == "ml"


@pytest.mark.asyncio
async def test_toggle_saved_and_liked(make_page) -> None:
    app, _ = _make_app(make_page)
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 3)
        browse.focus()
        await pilot.pause()

        await pilot.press("s")
        await pilot.press("l")
        await pilot.pause()

        first = app.engine.papers[0]
        assert app.store.saved.contains(first.id)
        assert app.store.liked.contains(first.id)
        saved_list = app.query_one("#saved-list", ListView)
        await _wait_for(pilot, lambda: len(saved_list.children) == 1)
        assert len(saved_list.children) == 1

        await pilot.press("s")
        await pilot.pause()
        assert not app.store.saved.contains(first.id)


@pytest.mark.asyncio
async def test_filter_change_resets_scope(make_page) -> None:
    app, pages = _make_app(make_page)
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 3)

        app.query_one("#search-input", Input).value = "diffusion"
        await _wait_for(pilot, lambda: len(pages.calls) >= 2, timeout=3.0)

        assert pages.calls[-1] == ('(cat:cs.* OR cat:math.*) AND ti:"diffusion"', 0)
        assert app.engine.scope.search_text == "diffusion"


@pytest.mark.asyncio
async def test_placeholder_results_are_flagged(make_page) -> None:
    def fallback(start: int) -> PageResult:
        return PageResult(
            papers=build_placeholder_batch(start),
            origin=ResultOrigin.PLACEHOLDER,
            offset=start,
            message="down",
        )

    app, _ = _make_app(make_page, result_for=fallback)
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) >= 10)
        assert app.engine.has_placeholders
        assert all(card.has_class("placeholder") for card in browse.children)


@pytest.mark.asyncio
async def test_open_pdf_uses_browser(make_page) -> None:
    app, _ = _make_app(make_page)
    with patch("arxiv_scroll.app.webbrowser.open") as open_mock:
        async with app.run_test() as pilot:
            browse = app.query_one("#browse-list", ListView)
            await _wait_for(pilot, lambda: len(browse.children) == 3)
            browse.focus()
            await pilot.press("o")
            await pilot.pause()
    open_mock.assert_called_once_with(app.engine.papers[0].pdf_url)


def _single_paper(record):
    def result_for(start: int) -> PageResult:
        papers = (record,) if start == 0 else ()
        return PageResult(papers=papers, origin=ResultOrigin.UPSTREAM, offset=start)

    return result_for


@pytest.mark.asyncio
async def test_failed_save_is_reported_and_not_applied(make_page) -> None:
    class BrokenStorage(MemoryStorage):
        def set(self, key: str, value: str) -> None:
            raise OSError("disk full")

    app, _ = _make_app(make_page, store=PreferenceStore.open(BrokenStorage()))
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 3)
        browse.focus()
        await pilot.pause()

        with patch.object(app, "notify") as notify_mock:
            await pilot.press("s")
            await pilot.pause()

        assert len(app.store.saved) == 0
        assert len(app.query_one("#saved-list", ListView).children) == 0
        message = notify_mock.call_args.args[0]
        assert "Could not update your saved papers." in message
        assert notify_mock.call_args.kwargs["severity"] == "error"


@pytest.mark.asyncio
async def test_details_screen_shows_whole_paper(make_page, make_record) -> None:
    abstract = " ".join(f"word{i}" for i in range(120))
    authors = tuple(f"Author {i}" for i in range(6))
    record = make_record(1, abstract=abstract, authors=authors)
    app, _ = _make_app(make_page, result_for=_single_paper(record))
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 1)
        browse.focus()
        await pilot.pause()

        await pilot.press("d")
        await pilot.pause()
        assert isinstance(app.screen, PaperDetailsScreen)
        assert app.screen.paper == record

        with patch.object(app, "copy_to_clipboard") as copy_mock:
            await pilot.press("y")
            await pilot.pause()
        copy_mock.assert_called_once_with(record.id)

        # List actions stay inactive behind the detail view
        await pilot.press("s")
        await pilot.pause()
        assert not app.store.saved.contains(record.id)

        await pilot.press("escape")
        await pilot.pause()
        assert not isinstance(app.screen, PaperDetailsScreen)

        browse.focus()
        await pilot.press("enter")
        await pilot.pause()
        assert isinstance(app.screen, PaperDetailsScreen)


@pytest.mark.asyncio
async def test_copy_link_from_list(make_page) -> None:
    app, _ = _make_app(make_page)
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 3)
        browse.focus()
        await pilot.pause()
        with patch.object(app, "copy_to_clipboard") as copy_mock:
            await pilot.press("y")
            await pilot.pause()
    copy_mock.assert_called_once_with(app.engine.papers[0].id)


@pytest.mark.asyncio
async def test_category_picker_sets_filter_and_remembers_it(make_page) -> None:
    app, pages = _make_app(make_page, categories=["q-bio.NC", "ml"], persist_config=True)
    with (
        patch("arxiv_scroll.app.load_config", return_value=UserConfig(batch_size=25)),
        patch("arxiv_scroll.app.save_config", return_value=True) as save_mock,
    ):
        async with app.run_test() as pilot:
            browse = app.query_one("#browse-list", ListView)
            await _wait_for(pilot, lambda: len(browse.children) == 3)
            browse.focus()
            await pilot.pause()

            await pilot.press("c")
            await pilot.pause()
            assert isinstance(app.screen, CategoryPickerModal)
            assert app.screen.selected == ["cs.LG"]

            await pilot.press("1", "2", "3")
            await pilot.press("enter")
            await pilot.pause()

            category_input = app.query_one("#category-input", Input)
            assert category_input.value == "q-bio.NC, cs.AI, cs.CV"
            await _wait_for(pilot, lambda: save_mock.called, timeout=3.0)

    assert ("cat:q-bio.NC OR cat:cs.AI OR cat:cs.CV", 0) in pages.calls
    saved = save_mock.call_args.args[0]
    assert saved.default_categories == ["q-bio.NC", "cs.AI", "cs.CV"]
    assert saved.batch_size == 25


@pytest.mark.asyncio
async def test_cancelled_picker_keeps_filter(make_page) -> None:
    app, _ = _make_app(make_page, categories=["ml"])
    async with app.run_test() as pilot:
        browse = app.query_one("#browse-list", ListView)
        await _wait_for(pilot, lambda: len(browse.children) == 3)
        browse.focus()
        await pilot.pause()

        await pilot.press("c", "1", "escape")
        await pilot.pause()

        assert not isinstance(app.screen, CategoryPickerModal)
        assert app.query_one("#category-input", Input).value == "ml"


@pytest.mark.asyncio
async def test_filter_change_without_persistence_does_not_write_config(make_page) -> None:
    app, pages = _make_app(make_page)
    with patch("arxiv_scroll.app.save_config") as save_mock:
        async with app.run_test() as pilot:
            browse = app.query_one("#browse-list", ListView)
            await _wait_for(pilot, lambda: len(browse.children) == 3)
            app.query_one("#category-input", Input).value = "cv"
            await _wait_for(pilot, lambda: ("cat:cs.CV", 0) in pages.calls, timeout=3.0)
            await pilot.pause()
    save_mock.assert_not_called()
    assert ("cat:cs.CV", 0) in pages.calls
