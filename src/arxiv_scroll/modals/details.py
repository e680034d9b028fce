"""Full-paper detail screen."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from arxiv_scroll.models import PaperRecord
from arxiv_scroll.widgets.details import PaperDetails, paper_link

logger = logging.getLogger(__name__)


class PaperDetailsScreen(ModalScreen[None]):
    """Scrollable view of one paper with its whole abstract and author list."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("enter", "close", "Close", show=False),
        Binding("y", "copy_link", "Copy link"),
    ]

    CSS = """
    PaperDetailsScreen {
        align: center middle;
    }

    #details-dialog {
        width: 80%;
        height: 80%;
        background: #272822;
        border: tall #66d9ef;
        padding: 0 2;
    }

    #details-scroll {
        height: 1fr;
    }

    #details-footer {
        color: #75715e;
        height: 1;
    }
    """

    def __init__(self, paper: PaperRecord) -> None:
        super().__init__()
        self._paper = paper

    @property
    def paper(self) -> PaperRecord:
        return self._paper

    def compose(self) -> ComposeResult:
        with Vertical(id="details-dialog"):
            with VerticalScroll(id="details-scroll"):
                yield PaperDetails(self._paper, id="paper-details")
            yield Static(
                "[dim]Copy link: y · Close: Esc[/]",
                id="details-footer",
            )

    def action_close(self) -> None:
        self.dismiss(None)

    def action_copy_link(self) -> None:
        link = paper_link(self._paper)
        if not link:
            self.notify("This paper has no link to copy", title="Copy", severity="warning")
            return
        self.app.copy_to_clipboard(link)
        logger.debug("Copied link %s", link)
        self.notify(f"Copied {link}", title="Copy")


__all__ = ["PaperDetailsScreen"]
