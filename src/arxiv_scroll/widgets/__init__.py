"""Widget classes for the paper feed UI."""

from arxiv_scroll.widgets.cards import (
    PREVIEW_ABSTRACT_MAX_LEN,
    PaperCard,
    render_meta_line,
    render_title_line,
)
from arxiv_scroll.widgets.chrome import THEME_COLORS, ContextFooter, render_status
from arxiv_scroll.widgets.details import PaperDetails, paper_link, render_paper_details

__all__ = [
    "PREVIEW_ABSTRACT_MAX_LEN",
    "THEME_COLORS",
    "ContextFooter",
    "PaperCard",
    "PaperDetails",
    "paper_link",
    "render_meta_line",
    "render_paper_details",
    "render_status",
    "render_title_line",
]
