"""Modal screens for the paper feed UI."""

from arxiv_scroll.modals.categories import CategoryPickerModal
from arxiv_scroll.modals.details import PaperDetailsScreen

__all__ = [
    "CategoryPickerModal",
    "PaperDetailsScreen",
]
