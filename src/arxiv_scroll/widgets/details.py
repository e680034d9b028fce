"""Detail view widget for the full text of one paper."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from textual.widgets import Static

from arxiv_scroll.categories import get_category_color, get_category_name
from arxiv_scroll.models import PaperRecord
from arxiv_scroll.widgets.cards import format_published
from arxiv_scroll.widgets.chrome import THEME_COLORS


def paper_link(paper: PaperRecord) -> str:
    """Shareable link for a paper: its abstract page, else its PDF."""
    if paper.id.startswith(("http://", "https://")):
        return paper.id
    return paper.pdf_url


def _render_title(paper: PaperRecord) -> str:
    title = f"[bold {THEME_COLORS['text']}]{escape_markup(paper.title)}[/]"
    if paper.is_placeholder:
        return f"[{THEME_COLORS['orange']}]SAMPLE[/] {title}"
    return title


def _render_metadata(paper: PaperRecord) -> str:
    label = f"bold {THEME_COLORS['accent']}"
    lines = []
    published = format_published(paper.published)
    if published:
        lines.append(f"  [{label}]Published:[/] {published}")
    updated = format_published(paper.updated)
    if updated and updated != published:
        lines.append(f"  [{label}]Updated:[/] {updated}")
    if paper.categories:
        names = ", ".join(
            f"[{get_category_color(code)}]{escape_markup(code)}[/] "
            f"[dim]({escape_markup(get_category_name(code))})[/]"
            for code in paper.categories
        )
        lines.append(f"  [{label}]Categories:[/] {names}")
    return "\n".join(lines)


def _render_authors(paper: PaperRecord) -> str:
    authors = escape_markup(", ".join(paper.authors))
    return f"[bold {THEME_COLORS['green']}]Authors[/]\n  [{THEME_COLORS['text']}]{authors}[/]"


def _render_abstract(paper: PaperRecord) -> str:
    abstract = escape_markup(paper.abstract)
    return f"[bold {THEME_COLORS['orange']}]Abstract[/]\n  [{THEME_COLORS['text']}]{abstract}[/]"


def _render_links(paper: PaperRecord) -> str:
    lines = [f"[bold {THEME_COLORS['pink']}]Links[/]"]
    link = paper_link(paper)
    if link and link != paper.pdf_url:
        lines.append(f"  [{THEME_COLORS['accent']}]{escape_markup(link)}[/]")
    if paper.pdf_url:
        lines.append(f"  [{THEME_COLORS['accent']}]{escape_markup(paper.pdf_url)}[/]")
    if len(lines) == 1:
        lines.append("  [dim italic]No links available[/]")
    return "\n".join(lines)


def render_paper_details(paper: PaperRecord) -> str:
    """Full markup for the detail view: every author and the whole abstract."""
    sections = [
        _render_title(paper),
        _render_metadata(paper),
        _render_authors(paper),
        _render_abstract(paper),
        _render_links(paper),
    ]
    return "\n\n".join(section for section in sections if section)


class PaperDetails(Static):
    """Widget to display full paper details."""

    def __init__(self, paper: PaperRecord | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._paper = paper

    def on_mount(self) -> None:
        self.update_paper(self._paper)

    def update_paper(self, paper: PaperRecord | None) -> None:
        self._paper = paper
        if paper is None:
            self.update("[dim italic]Select a paper to view details[/]")
            return
        self.update(render_paper_details(paper))

    @property
    def paper(self) -> PaperRecord | None:
        return self._paper


__all__ = [
    "PaperDetails",
    "paper_link",
    "render_paper_details",
]
