"""Shared test fixtures for arxiv-scroll tests."""

from __future__ import annotations

from typing import Any
from xml.sax.saxutils import escape

import pytest

from arxiv_scroll.models import PageResult, PaperRecord, ResultOrigin, UserConfig

# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_record():
    """Factory fixture for creating PaperRecord instances with sensible defaults."""

    def _make(
        n: int | str = 1,
        *,
        title: str | None = None,
        authors: tuple[str, ...] = ("Test Author",),
        abstract: str = "Test abstract content.",
        published: str | None = "2024-01-15T00:00:00Z",
        categories: tuple[str, ...] = ("cs.LG",),
        origin: ResultOrigin = ResultOrigin.UPSTREAM,
    ) -> PaperRecord:
        paper_id = n if isinstance(n, str) else f"http://arxiv.org/abs/2401.{n:05d}v1"
        return PaperRecord(
            id=paper_id,
            title=title if title is not None else f"Paper {n}",
            authors=authors,
            abstract=abstract,
            published=published,
            updated=published,
            categories=categories,
            pdf_url=paper_id.replace("abs", "pdf", 1),
            origin=origin,
        )

    return _make


@pytest.fixture
def make_page(make_record):
    """Factory for upstream PageResults holding records numbered ``numbers``."""

    def _make(numbers: range | list[int], offset: int = 0) -> PageResult:
        return PageResult(
            papers=tuple(make_record(n) for n in numbers),
            origin=ResultOrigin.UPSTREAM,
            offset=offset,
        )

    return _make


@pytest.fixture
def sample_config():
    """Factory fixture for creating UserConfig with optional overrides."""

    def _make(**kwargs: Any) -> UserConfig:
        return UserConfig(**kwargs)

    return _make


def _entry_xml(entry: dict[str, Any]) -> str:
    parts = ["<entry>"]
    if entry.get("id") is not None:
        parts.append(f"<id>{escape(entry['id'])}</id>")
    for tag in ("title", "summary", "published", "updated"):
        if entry.get(tag) is not None:
            parts.append(f"<{tag}>{escape(entry[tag])}</{tag}>")
    for name in entry.get("authors", []):
        parts.append(f"<author><name>{escape(name)}</name></author>")
    for term in entry.get("categories", []):
        parts.append(f'<category term="{escape(term)}"/>')
    if entry.get("pdf"):
        parts.append(f'<link title="pdf" href="{escape(entry["pdf"])}" rel="related"/>')
    parts.append("</entry>")
    return "".join(parts)


@pytest.fixture
def make_feed():
    """Build an Atom feed document from entry dicts."""

    def _make(*entries: dict[str, Any]) -> str:
        body = "".join(_entry_xml(entry) for entry in entries)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<feed xmlns="http://www.w3.org/2005/Atom" '
            'xmlns:arxiv="http://arxiv.org/schemas/atom">'
            "<title>arXiv Query</title>"
            f"{body}</feed>"
        )

    return _make
