"""arxiv-scroll: an endless, filterable feed of recent arXiv papers."""

from arxiv_scroll.models import (
    DisplayState,
    FetchFailure,
    FetchFailureReason,
    FilterScope,
    PageResult,
    PaperRecord,
    ResultOrigin,
    UserConfig,
)
from arxiv_scroll.pagination import PaginationEngine
from arxiv_scroll.preferences import PreferenceStore
from arxiv_scroll.query import build_search_query, normalize_scope
from arxiv_scroll.services.retry import RetryController

__version__ = "0.1.0"

__all__ = [
    "DisplayState",
    "FetchFailure",
    "FetchFailureReason",
    "FilterScope",
    "PageResult",
    "PaginationEngine",
    "PaperRecord",
    "PreferenceStore",
    "ResultOrigin",
    "RetryController",
    "UserConfig",
    "build_search_query",
    "normalize_scope",
]
