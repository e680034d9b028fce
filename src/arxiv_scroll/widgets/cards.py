"""Card rendering for paper entries."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.widgets import ListItem, Static

from arxiv_scroll.categories import get_category_color
from arxiv_scroll.models import PaperRecord
from arxiv_scroll.widgets.chrome import THEME_COLORS

PREVIEW_ABSTRACT_MAX_LEN = 200
MAX_LISTED_AUTHORS = 3


def format_authors(authors: tuple[str, ...]) -> str:
    if len(authors) <= MAX_LISTED_AUTHORS:
        return ", ".join(authors)
    shown = ", ".join(authors[:MAX_LISTED_AUTHORS])
    return f"{shown} +{len(authors) - MAX_LISTED_AUTHORS} more"


def format_categories(categories: tuple[str, ...]) -> str:
    """Render category codes with their colors."""
    return " ".join(
        f"[{get_category_color(code)}]{escape_markup(code)}[/]" for code in categories
    )


def format_published(published: str | None) -> str:
    """Date part of an ISO timestamp, or empty."""
    if not published:
        return ""
    return published.split("T", 1)[0]


def _render_abstract_preview(abstract: str) -> str:
    if len(abstract) <= PREVIEW_ABSTRACT_MAX_LEN:
        return f"[dim italic]{escape_markup(abstract)}[/]"
    # Truncate at word boundary for cleaner display
    truncated = abstract[:PREVIEW_ABSTRACT_MAX_LEN].rsplit(" ", 1)[0]
    return f"[dim italic]{escape_markup(truncated)}...[/]"


def render_title_line(paper: PaperRecord, *, saved: bool = False, liked: bool = False) -> str:
    """Title with saved/liked markers and a badge for placeholder data."""
    prefix: list[str] = []
    if paper.is_placeholder:
        prefix.append(f"[{THEME_COLORS['orange']}]SAMPLE[/]")
    if saved:
        prefix.append(f"[{THEME_COLORS['green']}]●[/]")
    if liked:
        prefix.append(f"[{THEME_COLORS['pink']}]♥[/]")
    title = f"[bold]{escape_markup(paper.title)}[/]"
    return " ".join([*prefix, title])


def render_meta_line(paper: PaperRecord) -> str:
    parts = [format_categories(paper.categories)]
    date_text = format_published(paper.published)
    if date_text:
        parts.append(f"[dim]{date_text}[/]")
    return "  ".join(part for part in parts if part)


class PaperCard(ListItem):
    """A list item displaying one paper."""

    def __init__(
        self,
        paper: PaperRecord,
        *,
        saved: bool = False,
        liked: bool = False,
        show_preview: bool = True,
    ) -> None:
        super().__init__()
        self.paper = paper
        self._saved = saved
        self._liked = liked
        self._show_preview = show_preview
        if paper.is_placeholder:
            self.add_class("placeholder")

    def set_marks(self, *, saved: bool, liked: bool) -> None:
        """Update saved/liked markers and refresh the title line."""
        self._saved = saved
        self._liked = liked
        try:
            self.query_one(".paper-title", Static).update(self._title_text())
        except NoMatches:
            return

    def _title_text(self) -> str:
        return render_title_line(self.paper, saved=self._saved, liked=self._liked)

    def compose(self) -> ComposeResult:
        yield Static(self._title_text(), classes="paper-title")
        yield Static(escape_markup(format_authors(self.paper.authors)), classes="paper-authors")
        yield Static(render_meta_line(self.paper), classes="paper-meta")
        if self._show_preview:
            yield Static(_render_abstract_preview(self.paper.abstract), classes="paper-preview")


__all__ = [
    "PREVIEW_ABSTRACT_MAX_LEN",
    "PaperCard",
    "format_authors",
    "format_categories",
    "format_published",
    "render_meta_line",
    "render_title_line",
]
