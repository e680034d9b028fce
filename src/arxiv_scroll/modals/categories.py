"""Quick picker for popular arXiv categories."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Label, Static

from arxiv_scroll.categories import POPULAR_CATEGORIES, get_category_name
from arxiv_scroll.widgets.chrome import THEME_COLORS

# Keys 1-9 then 0 select the first ten popular categories
PICKER_KEYS = "1234567890"


class CategoryPickerModal(ModalScreen[list[str] | None]):
    """Toggle popular categories on or off for the feed filter.

    Dismisses with the chosen codes in ``POPULAR_CATEGORIES`` order, or None
    when cancelled.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("enter", "save", "Save"),
        *(
            Binding(key, f"toggle({index})", "", show=False)
            for index, key in enumerate(PICKER_KEYS[: len(POPULAR_CATEGORIES)])
        ),
    ]

    CSS = """
    CategoryPickerModal {
        align: center middle;
    }

    #category-picker-dialog {
        width: 60;
        height: auto;
        background: #272822;
        border: tall #66d9ef;
        padding: 0 2;
    }

    #category-picker-title {
        text-style: bold;
        color: #66d9ef;
        margin-bottom: 1;
    }

    #category-picker-footer {
        color: #75715e;
        margin-top: 1;
    }
    """

    def __init__(self, selected: list[str] | None = None) -> None:
        super().__init__()
        self._selected: set[str] = {code for code in selected or () if code in POPULAR_CATEGORIES}

    @property
    def selected(self) -> list[str]:
        return [code for code in POPULAR_CATEGORIES if code in self._selected]

    def compose(self) -> ComposeResult:
        with Vertical(id="category-picker-dialog"):
            yield Label("Research Interests", id="category-picker-title")
            yield Static(self._render_list(), id="category-picker-list")
            yield Static(
                "[dim]Toggle: 1-0 · Apply: Enter · Cancel: Esc[/]",
                id="category-picker-footer",
            )

    def _render_list(self) -> str:
        g = THEME_COLORS["green"]
        lines = []
        for key, code in zip(PICKER_KEYS, POPULAR_CATEGORIES):
            mark = f"[{g}]●[/]" if code in self._selected else "[dim]○[/]"
            lines.append(f"  [{g}]{key}[/]  {mark} {code:<7s} {get_category_name(code)}")
        return "\n".join(lines)

    def action_toggle(self, index: int) -> None:
        if not 0 <= index < len(POPULAR_CATEGORIES):
            return
        code = POPULAR_CATEGORIES[index]
        if code in self._selected:
            self._selected.discard(code)
        else:
            self._selected.add(code)
        try:
            self.query_one("#category-picker-list", Static).update(self._render_list())
        except NoMatches:
            pass

    def action_save(self) -> None:
        self.dismiss(self.selected)

    def action_cancel(self) -> None:
        self.dismiss(None)


__all__ = [
    "PICKER_KEYS",
    "CategoryPickerModal",
]
