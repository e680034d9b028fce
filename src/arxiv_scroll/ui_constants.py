"""Internal UI constants for the PaperScrollApp."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: #272822;
}

#filter-bar {
    height: auto;
    padding: 0 1;
}

#search-input {
    width: 2fr;
}

#category-input {
    width: 1fr;
}

TabbedContent {
    height: 1fr;
}

ListView {
    height: 1fr;
    background: #1e1e1e;
}

PaperCard {
    padding: 0 1;
    border-bottom: solid #3e3d32;
}

PaperCard.placeholder {
    background: #3e3d32;
}

.paper-title {
    color: #f8f8f2;
}

.paper-authors {
    color: #66d9ef;
}

.paper-preview {
    color: #75715e;
}

#status-bar {
    height: 1;
    padding: 0 1;
    background: #3e3d32;
    width: 100%;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    Binding("slash", "focus_search", "Search", show=False),
    Binding("escape", "focus_list", "Back to list", show=False),
    Binding("s", "toggle_saved", "Save", show=False),
    Binding("l", "toggle_liked", "Like", show=False),
    Binding("m", "load_more", "More", show=False),
    Binding("o", "open_pdf", "Open PDF", show=False),
    Binding("d", "show_details", "Details", show=False),
    Binding("y", "copy_link", "Copy link", show=False),
    Binding("c", "pick_categories", "Categories", show=False),
    Binding("r", "refresh", "Refresh", show=False),
]

FOOTER_HINTS: list[tuple[str, str]] = [
    ("/", "search"),
    ("s", "save"),
    ("l", "like"),
    ("m", "more"),
    ("o", "pdf"),
    ("d", "details"),
    ("y", "copy link"),
    ("c", "topics"),
    ("r", "refresh"),
    ("q", "quit"),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "FOOTER_HINTS",
]
