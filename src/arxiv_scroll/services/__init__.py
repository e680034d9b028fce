"""Internal service layer: feed gateway, retry policy, and service wiring."""

from arxiv_scroll.services.feed_gateway import ARXIV_API_URL, fetch_page
from arxiv_scroll.services.retry import (
    RetryController,
    backoff_delay,
    build_placeholder_batch,
)

__all__ = [
    "ARXIV_API_URL",
    "RetryController",
    "backoff_delay",
    "build_placeholder_batch",
    "fetch_page",
]
