"""Status bar and footer hints around the paper lists."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from textual.widgets import Static

from arxiv_scroll.models import DisplayState

THEME_COLORS = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "green": "#a6e22e",
    "yellow": "#e6db74",
    "orange": "#fd971f",
    "pink": "#f92672",
}


def render_status(
    state: DisplayState,
    *,
    query_label: str,
    saved_count: int,
    liked_count: int,
    notice: str = "",
) -> str:
    """Render the one-line status bar as Rich markup."""
    parts = [f"[{THEME_COLORS['accent']}]{escape_markup(query_label)}[/]"]
    parts.append(f"{len(state.papers)} papers")
    if state.loading:
        parts.append(f"[{THEME_COLORS['yellow']}]loading...[/]")
    elif not state.has_more:
        parts.append(f"[{THEME_COLORS['muted']}]end of results[/]")
    parts.append(f"[{THEME_COLORS['green']}]saved {saved_count}[/]")
    parts.append(f"[{THEME_COLORS['pink']}]liked {liked_count}[/]")
    if notice:
        parts.append(f"[{THEME_COLORS['orange']}]{escape_markup(notice)}[/]")
    return "  ·  ".join(parts)


class ContextFooter(Static):
    """Footer showing the active key bindings."""

    DEFAULT_CSS = """
    ContextFooter {
        dock: bottom;
        height: 1;
        padding: 0 1;
    }
    """

    def render_bindings(self, bindings: list[tuple[str, str]]) -> None:
        """Update the footer with a list of (key, label) binding hints."""
        accent = THEME_COLORS["accent"]
        muted = THEME_COLORS["muted"]
        parts = [
            f"[bold {accent}]{escape_markup(key)}[/] [{muted}]{label}[/]" for key, label in bindings
        ]
        self.update("  ".join(parts))


__all__ = [
    "THEME_COLORS",
    "ContextFooter",
    "render_status",
]
