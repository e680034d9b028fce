"""Data models and constants for the arxiv-scroll paper feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Application name used for platformdirs paths
CONFIG_APP_NAME = "arxiv-scroll"

# Placeholder text for fields missing upstream
UNTITLED_PAPER = "Untitled Paper"
NO_ABSTRACT = "No abstract available"
UNKNOWN_AUTHOR = "Unknown Author"

# Feed paging constants
DEFAULT_BATCH_SIZE = 50
MAX_BATCH_SIZE = 200
DEFAULT_SORT_BY = "submittedDate"
DEFAULT_SORT_ORDER = "descending"
SORT_BY_OPTIONS = ("relevance", "lastUpdatedDate", "submittedDate")
SORT_ORDER_OPTIONS = ("ascending", "descending")

# Request deadlines (seconds)
DEFAULT_REQUEST_TIMEOUT = 30
MIN_REQUEST_TIMEOUT = 15
MAX_REQUEST_TIMEOUT = 60

# Spacing between accepted load_more calls (seconds)
DEFAULT_MIN_LOAD_INTERVAL = 1.0
MAX_MIN_LOAD_INTERVAL = 3.0

# Retry policy
DEFAULT_MAX_ATTEMPTS = 5
MAX_ATTEMPTS_LIMIT = 10
PLACEHOLDER_BATCH_SIZE = 10

# End-of-results detection and under-fill recovery
EMPTY_PAGE_LIMIT = 3
DEFAULT_LOW_WATER_MARK = 10
DEFAULT_MAX_REOPENS = 2
UNDERFILL_JUMP_PAGES = 4


class ResultOrigin(str, Enum):
    """Where a record came from: the real feed or local placeholder data."""

    UPSTREAM = "upstream"
    PLACEHOLDER = "placeholder"


class FetchFailureReason(str, Enum):
    """Reason codes for a failed feed round trip."""

    UPSTREAM_ERROR = "UpstreamError"
    EMPTY_BODY = "EmptyBody"
    PARSE_ERROR = "ParseError"
    TIMEOUT = "Timeout"
    NETWORK_ERROR = "NetworkError"


class FetchFailure(Exception):
    """Raised by the feed gateway when one round trip fails."""

    def __init__(
        self,
        reason: FetchFailureReason,
        message: str = "",
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message or reason.value)
        self.reason = reason
        self.message = message or reason.value
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class PaperRecord:
    """One paper from the feed. ``id`` is the sole identity."""

    id: str
    title: str = UNTITLED_PAPER
    authors: tuple[str, ...] = (UNKNOWN_AUTHOR,)
    abstract: str = NO_ABSTRACT
    published: str | None = None
    updated: str | None = None
    categories: tuple[str, ...] = ()
    pdf_url: str = ""
    origin: ResultOrigin = ResultOrigin.UPSTREAM

    @property
    def is_placeholder(self) -> bool:
        return self.origin is ResultOrigin.PLACEHOLDER

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape used on the wire and on disk."""
        return {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "abstract": self.abstract,
            "published": self.published,
            "updated": self.updated,
            "categories": list(self.categories),
            "pdfUrl": self.pdf_url,
            "origin": self.origin.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> PaperRecord | None:
        """Deserialize a record, returning None when it has no usable id."""
        if not isinstance(data, dict):
            return None
        paper_id = data.get("id")
        if not isinstance(paper_id, str) or not paper_id.strip():
            return None

        def _text(key: str, default: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) and value else default

        def _optional(key: str) -> str | None:
            value = data.get(key)
            return value if isinstance(value, str) and value else None

        def _strings(key: str) -> tuple[str, ...]:
            value = data.get(key)
            if not isinstance(value, list):
                return ()
            return tuple(dict.fromkeys(item for item in value if isinstance(item, str) and item))

        try:
            origin = ResultOrigin(data.get("origin", ResultOrigin.UPSTREAM.value))
        except ValueError:
            origin = ResultOrigin.UPSTREAM

        published = _optional("published")
        return cls(
            id=paper_id,
            title=_text("title", UNTITLED_PAPER),
            authors=_strings("authors") or (UNKNOWN_AUTHOR,),
            abstract=_text("abstract", NO_ABSTRACT),
            published=published,
            updated=_optional("updated") or published,
            categories=_strings("categories"),
            pdf_url=_text("pdfUrl", ""),
            origin=origin,
        )


@dataclass(frozen=True, slots=True)
class FilterScope:
    """Normalized filter set identifying one logical result stream."""

    search_text: str = ""
    categories: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PageResult:
    """Outcome of one logical page request. Never an exception."""

    papers: tuple[PaperRecord, ...]
    origin: ResultOrigin
    offset: int
    attempts: int = 1
    failure: FetchFailureReason | None = None
    message: str = ""

    @property
    def used_fallback(self) -> bool:
        return self.origin is ResultOrigin.PLACEHOLDER


@dataclass(frozen=True, slots=True)
class DisplayState:
    """Read-only snapshot handed to the display layer."""

    papers: tuple[PaperRecord, ...] = ()
    loading: bool = False
    has_more: bool = True


@dataclass(slots=True)
class UserConfig:
    """User configuration for feed paging and display."""

    batch_size: int = DEFAULT_BATCH_SIZE
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT
    min_load_interval_seconds: float = DEFAULT_MIN_LOAD_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    low_water_mark: int = DEFAULT_LOW_WATER_MARK
    max_underfill_reopens: int = DEFAULT_MAX_REOPENS
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER
    default_categories: list[str] = field(default_factory=list)
    show_abstract_preview: bool = True
    version: int = 1


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_LOW_WATER_MARK",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_REOPENS",
    "DEFAULT_MIN_LOAD_INTERVAL",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_SORT_BY",
    "DEFAULT_SORT_ORDER",
    "EMPTY_PAGE_LIMIT",
    "MAX_ATTEMPTS_LIMIT",
    "MAX_BATCH_SIZE",
    "MAX_MIN_LOAD_INTERVAL",
    "MAX_REQUEST_TIMEOUT",
    "MIN_REQUEST_TIMEOUT",
    "NO_ABSTRACT",
    "PLACEHOLDER_BATCH_SIZE",
    "SORT_BY_OPTIONS",
    "SORT_ORDER_OPTIONS",
    "UNDERFILL_JUMP_PAGES",
    "UNKNOWN_AUTHOR",
    "UNTITLED_PAPER",
    "DisplayState",
    "FetchFailure",
    "FetchFailureReason",
    "FilterScope",
    "PageResult",
    "PaperRecord",
    "ResultOrigin",
    "UserConfig",
]
