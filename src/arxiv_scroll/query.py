"""Filter normalization and arXiv search query construction."""

from __future__ import annotations

from collections.abc import Iterable

from arxiv_scroll.categories import resolve_category_tag
from arxiv_scroll.models import FilterScope

# Used when no category filter is selected
DEFAULT_ROOT_QUERY = "(cat:cs.* OR cat:math.*)"

_QUERY_UNSAFE_CHARS = str.maketrans("", "", '"\\')


def _check_encodable(text: str, label: str) -> None:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(f"{label} is not valid text: {exc.reason}") from exc


def normalize_scope(search_text: str = "", categories: Iterable[str] = ()) -> FilterScope:
    """Normalize raw filter input into a FilterScope.

    Collapses whitespace in the search text, maps friendly tags to category
    codes, and drops blank or repeated categories while keeping selection
    order. Empty input means "no constraint".

    Raises:
        ValueError: if the input cannot be encoded as UTF-8.
    """
    _check_encodable(search_text or "", "Search text")
    text = " ".join((search_text or "").split())

    normalized: list[str] = []
    for raw in categories:
        _check_encodable(raw, "Category")
        code = resolve_category_tag(raw)
        if code and code not in normalized:
            normalized.append(code)

    return FilterScope(search_text=text, categories=tuple(normalized))


def escape_query_text(text: str) -> str:
    """Make free text safe to embed inside a quoted arXiv query clause."""
    return " ".join(text.translate(_QUERY_UNSAFE_CHARS).split())


def build_search_query(scope: FilterScope) -> str:
    """Build the arXiv API ``search_query`` expression for a scope.

    Examples:
    - no filters -> ``(cat:cs.* OR cat:math.*)``
    - cs.LG, cs.AI -> ``cat:cs.LG OR cat:cs.AI``
    - cs.LG + "diffusion" -> ``cat:cs.LG AND ti:"diffusion"``
    """
    if scope.categories:
        category_clause = " OR ".join(f"cat:{code}" for code in scope.categories)
    else:
        category_clause = DEFAULT_ROOT_QUERY

    title_text = escape_query_text(scope.search_text)
    if not title_text:
        return category_clause

    if len(scope.categories) > 1:
        category_clause = f"({category_clause})"
    return f'{category_clause} AND ti:"{title_text}"'


def format_query_label(scope: FilterScope) -> str:
    """Build a short human-readable label for a scope."""
    parts: list[str] = []
    if scope.search_text:
        parts.append(f'"{scope.search_text}"')
    if scope.categories:
        parts.append(", ".join(scope.categories))
    return " in ".join(parts) if parts else "All recent papers"


__all__ = [
    "DEFAULT_ROOT_QUERY",
    "build_search_query",
    "escape_query_text",
    "format_query_label",
    "normalize_scope",
]
