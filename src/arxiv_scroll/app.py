"""Textual app: an endless list of arXiv papers with saved/liked tabs."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Any

import httpx
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import Header, Input, Label, ListView, TabbedContent, TabPane

from arxiv_scroll.action_messages import (
    build_actionable_error,
    build_placeholder_notice,
    build_toggle_message,
)
from arxiv_scroll.categories import POPULAR_CATEGORIES, resolve_category_tag
from arxiv_scroll.config import load_config, save_config
from arxiv_scroll.modals import CategoryPickerModal, PaperDetailsScreen
from arxiv_scroll.models import DisplayState, PaperRecord, UserConfig
from arxiv_scroll.pagination import PaginationEngine
from arxiv_scroll.preferences import PreferenceCollection, PreferenceSaveError, PreferenceStore
from arxiv_scroll.query import format_query_label
from arxiv_scroll.services.interfaces import AppServices, build_default_app_services
from arxiv_scroll.ui_constants import APP_BINDINGS, APP_CSS, FOOTER_HINTS
from arxiv_scroll.widgets import ContextFooter, PaperCard, paper_link, render_status

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_DELAY = 0.5
LOAD_MORE_THRESHOLD = 5  # Items from the end of the list that trigger a fetch
LOAD_MORE_POLL_INTERVAL = 1.0

TAB_BROWSE = "tab-browse"
TAB_SAVED = "tab-saved"
TAB_LIKED = "tab-liked"

# Actions that act on the highlighted list row, disabled while a modal is open
_LIST_ACTIONS = frozenset(
    {
        "toggle_saved",
        "toggle_liked",
        "load_more",
        "open_pdf",
        "show_details",
        "copy_link",
        "pick_categories",
        "refresh",
        "focus_search",
        "focus_list",
    }
)


def should_load_more(index: int | None, total: int, threshold: int = LOAD_MORE_THRESHOLD) -> bool:
    """Return True when the highlighted row is close enough to the end.

    An empty list always asks for more; the engine decides if it can.
    """
    if total <= 0:
        return True
    if index is None:
        return total <= threshold
    return index >= total - threshold


def parse_category_input(text: str) -> list[str]:
    """Split the comma-separated categories field."""
    return [part.strip() for part in text.split(",") if part.strip()]


class PaperScrollApp(App):
    """Browse recent arXiv papers as an endless scroll."""

    TITLE = "arXiv Scroll"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        config: UserConfig | None = None,
        *,
        store: PreferenceStore | None = None,
        services: AppServices | None = None,
        search_text: str = "",
        categories: list[str] | None = None,
        poll_interval: float = LOAD_MORE_POLL_INTERVAL,
        persist_config: bool = False,
    ) -> None:
        super().__init__()
        self._config = config or UserConfig()
        self._persist_config = persist_config
        self._store = store if store is not None else PreferenceStore.open()
        self._services = services
        self._http_client: httpx.AsyncClient | None = None
        self._engine: PaginationEngine | None = None
        self._initial_text = search_text
        self._initial_categories = (
            categories if categories is not None else list(self._config.default_categories)
        )
        self._poll_interval = poll_interval
        self._search_timer: Timer | None = None
        self._poll_timer: Timer | None = None
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._rendered_ids: list[str] = []
        self._notice = ""

    @property
    def engine(self) -> PaginationEngine:
        if self._engine is None:
            raise RuntimeError("PaperScrollApp is not mounted")
        return self._engine

    @property
    def store(self) -> PreferenceStore:
        return self._store

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="filter-bar"):
            yield Input(
                value=self._initial_text,
                placeholder=" Search titles",
                id="search-input",
            )
            yield Input(
                value=", ".join(self._initial_categories),
                placeholder=" Categories: ml, cv, cs.CL",
                id="category-input",
            )
        with TabbedContent(initial=TAB_BROWSE):
            with TabPane("Browse", id=TAB_BROWSE):
                yield ListView(id="browse-list")
            with TabPane("Saved", id=TAB_SAVED):
                yield ListView(id="saved-list")
            with TabPane("Liked", id=TAB_LIKED):
                yield ListView(id="liked-list")
        yield Label("", id="status-bar")
        yield ContextFooter()

    def on_mount(self) -> None:
        if self._services is None:
            # Shared HTTP client for connection pooling across page fetches
            self._http_client = httpx.AsyncClient()
            self._services = build_default_app_services(self._config, self._http_client)
        self._engine = PaginationEngine.from_config(self._services.pages, self._config)
        self._engine.subscribe(self._on_display_state)

        self.query_one(ContextFooter).render_bindings(FOOTER_HINTS)
        self._refresh_collection(self._store.saved, "#saved-list")
        self._refresh_collection(self._store.liked, "#liked-list")
        self._update_status_bar()

        self._track_task(self._apply_scope(self._initial_text, self._initial_categories))
        self._poll_timer = self.set_interval(self._poll_interval, self._poll_load_more)
        self.query_one("#browse-list", ListView).focus()
        logger.debug(
            "App mounted: saved=%d liked=%d", len(self._store.saved), len(self._store.liked)
        )

    async def on_unmount(self) -> None:
        """Stop timers, cancel background work, close the shared client."""
        for timer in (self._search_timer, self._poll_timer):
            if timer is not None:
                timer.stop()
        self._search_timer = None
        self._poll_timer = None

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending, timeout=0.5)
        self._background_tasks.clear()

        if self._engine is not None:
            self._engine.unsubscribe(self._on_display_state)
            await self._engine.aclose()

        client = self._http_client
        self._http_client = None
        if client is not None:
            await client.aclose()

    # ── Background tasks ─────────────────────────────────────────────────

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ── Filters ──────────────────────────────────────────────────────────

    async def _apply_scope(
        self, search_text: str, categories: list[str], *, remember: bool = False
    ) -> None:
        try:
            changed = await self.engine.set_scope(search_text, categories)
        except ValueError as exc:
            self.notify(
                build_actionable_error(
                    "apply the filter",
                    why=str(exc),
                    next_step="remove unusual characters from the search text",
                ),
                title="Filter",
                severity="error",
            )
            return
        if changed:
            self.sub_title = format_query_label(self.engine.scope)
        if remember:
            self._remember_categories(categories)

    def _remember_categories(self, categories: list[str]) -> None:
        """Keep the filter categories as the default for the next session."""
        if categories == self._config.default_categories:
            return
        self._config.default_categories = list(categories)
        if not self._persist_config:
            return
        # Reload so command-line overrides in self._config stay out of the file
        stored = load_config()
        stored.default_categories = list(categories)
        if not save_config(stored):
            self.notify(
                "Failed to save category preferences.", title="Config", severity="warning"
            )

    @on(Input.Changed, "#search-input")
    @on(Input.Changed, "#category-input")
    def on_filter_changed(self, event: Input.Changed) -> None:
        """Restart the debounce timer on every keystroke."""
        old_timer = self._search_timer
        self._search_timer = None
        if old_timer is not None:
            old_timer.stop()
        self._search_timer = self.set_timer(SEARCH_DEBOUNCE_DELAY, self._debounced_filter)

    @on(Input.Submitted)
    def on_filter_submitted(self, event: Input.Submitted) -> None:
        self._debounced_filter()
        self.action_focus_list()

    def _debounced_filter(self) -> None:
        """Apply the filter fields after the debounce delay."""
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()
        if self._engine is None:
            return
        search_text = self.query_one("#search-input", Input).value
        categories = parse_category_input(self.query_one("#category-input", Input).value)
        self._track_task(self._apply_scope(search_text, categories, remember=True))

    # ── Infinite scroll ──────────────────────────────────────────────────

    def _maybe_load_more(self) -> None:
        if self._engine is None:
            return
        browse = self.query_one("#browse-list", ListView)
        if should_load_more(browse.index, len(self._rendered_ids)):
            self._engine.request_load_more()

    @on(ListView.Highlighted, "#browse-list")
    def on_browse_highlighted(self, event: ListView.Highlighted) -> None:
        self._maybe_load_more()

    def _poll_load_more(self) -> None:
        """Retry the trigger so a request refused by spacing is not lost."""
        if self._engine is None or not self._engine.has_more:
            return
        self._maybe_load_more()

    def _on_display_state(self, state: DisplayState) -> None:
        self._render_browse(state.papers)
        engine = self._engine
        if engine is not None and engine.has_placeholders:
            self._notice = build_placeholder_notice("")
        else:
            self._notice = ""
        self._update_status_bar(state)

    def _render_browse(self, papers: tuple[PaperRecord, ...]) -> None:
        """Append new cards, or rebuild the list after a scope reset."""
        try:
            browse = self.query_one("#browse-list", ListView)
        except NoMatches:
            return
        ids = [paper.id for paper in papers]
        rendered = len(self._rendered_ids)
        if ids[:rendered] != self._rendered_ids:
            browse.clear()
            self._rendered_ids = []
            rendered = 0
        new_papers = papers[rendered:]
        if not new_papers:
            return
        browse.extend(self._card(paper) for paper in new_papers)
        self._rendered_ids.extend(paper.id for paper in new_papers)
        if browse.index is None:
            browse.index = 0

    def _card(self, paper: PaperRecord) -> PaperCard:
        return PaperCard(
            paper,
            saved=self._store.saved.contains(paper.id),
            liked=self._store.liked.contains(paper.id),
            show_preview=self._config.show_abstract_preview,
        )

    # ── Saved / liked ────────────────────────────────────────────────────

    def _refresh_collection(self, collection: PreferenceCollection, selector: str) -> None:
        try:
            list_view = self.query_one(selector, ListView)
        except NoMatches:
            return
        list_view.clear()
        list_view.extend(self._card(paper) for paper in collection.list())

    def _refresh_marks(self) -> None:
        for card in self.query(PaperCard):
            card.set_marks(
                saved=self._store.saved.contains(card.paper.id),
                liked=self._store.liked.contains(card.paper.id),
            )

    def _active_list(self) -> ListView:
        active = self.query_one(TabbedContent).active
        selector = {
            TAB_SAVED: "#saved-list",
            TAB_LIKED: "#liked-list",
        }.get(active, "#browse-list")
        return self.query_one(selector, ListView)

    def _current_paper(self) -> PaperRecord | None:
        item = self._active_list().highlighted_child
        if isinstance(item, PaperCard):
            return item.paper
        return None

    def _toggle(self, collection: PreferenceCollection, selector: str, label: str) -> None:
        paper = self._current_paper()
        if paper is None:
            self.notify("No paper highlighted", title=label, severity="warning")
            return
        try:
            present = collection.toggle(paper)
        except PreferenceSaveError as exc:
            self.notify(
                build_actionable_error(
                    f"update your {collection.name} papers",
                    why=str(exc),
                    next_step="check that the data directory is writable and try again",
                ),
                title=label,
                severity="error",
                timeout=8,
            )
            return
        self._refresh_collection(collection, selector)
        self._refresh_marks()
        self._update_status_bar()
        self.notify(build_toggle_message(collection.name, paper.title, present), title=label)

    def action_toggle_saved(self) -> None:
        self._toggle(self._store.saved, "#saved-list", "Saved")

    def action_toggle_liked(self) -> None:
        self._toggle(self._store.liked, "#liked-list", "Liked")

    # ── Other actions ────────────────────────────────────────────────────

    def action_load_more(self) -> None:
        engine = self.engine
        if engine.request_load_more() is not None:
            return
        if engine.loading:
            self.notify("Already loading", title="Feed")
        elif not engine.has_more:
            self.notify("No more papers for this filter", title="Feed")

    def action_refresh(self) -> None:
        self._track_task(self.engine.refresh())

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def action_focus_list(self) -> None:
        self._active_list().focus()

    def action_open_pdf(self) -> None:
        paper = self._current_paper()
        if paper is None:
            return
        if not paper.pdf_url:
            self.notify("This paper has no PDF link", title="PDF", severity="warning")
            return
        self._safe_browser_open(paper.pdf_url)

    def action_show_details(self) -> None:
        paper = self._current_paper()
        if paper is not None:
            self.push_screen(PaperDetailsScreen(paper))

    @on(ListView.Selected)
    def on_paper_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, PaperCard):
            self.push_screen(PaperDetailsScreen(event.item.paper))

    def action_copy_link(self) -> None:
        paper = self._current_paper()
        if paper is None:
            return
        link = paper_link(paper)
        if not link:
            self.notify("This paper has no link to copy", title="Copy", severity="warning")
            return
        self.copy_to_clipboard(link)
        self.notify(f"Copied {link}", title="Copy")

    def action_pick_categories(self) -> None:
        """Open the popular-category picker for the category filter."""
        category_input = self.query_one("#category-input", Input)
        current = parse_category_input(category_input.value)
        resolved = [resolve_category_tag(value) for value in current]

        def _on_result(chosen: list[str] | None) -> None:
            if chosen is None:
                return
            # Hand-typed categories outside the popular list are kept
            others = [
                value
                for value, code in zip(current, resolved)
                if code not in POPULAR_CATEGORIES
            ]
            category_input.value = ", ".join([*others, *chosen])

        self.push_screen(CategoryPickerModal(resolved), _on_result)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action in _LIST_ACTIONS and isinstance(self.screen, ModalScreen):
            return False
        return True

    def _safe_browser_open(self, url: str) -> bool:
        """Open a URL in the browser with error handling. Returns True on success."""
        try:
            webbrowser.open(url)
            return True
        except (webbrowser.Error, OSError) as e:
            logger.warning("Failed to open browser for %s: %s", url, e)
            self.notify(
                build_actionable_error(
                    "open your browser",
                    why="the system browser command failed",
                    next_step=f"open {url} manually",
                ),
                title="Browser",
                severity="error",
                timeout=8,
            )
            return False

    def _update_status_bar(self, state: DisplayState | None = None) -> None:
        try:
            status = self.query_one("#status-bar", Label)
        except NoMatches:
            return
        if state is None:
            state = self._engine.snapshot() if self._engine is not None else DisplayState()
        scope_label = format_query_label(self._engine.scope) if self._engine else ""
        status.update(
            render_status(
                state,
                query_label=scope_label,
                saved_count=len(self._store.saved),
                liked_count=len(self._store.liked),
                notice=self._notice,
            )
        )


__all__ = [
    "LOAD_MORE_POLL_INTERVAL",
    "LOAD_MORE_THRESHOLD",
    "SEARCH_DEBOUNCE_DELAY",
    "PaperScrollApp",
    "parse_category_input",
    "should_load_more",
]
