"""Translation of arXiv Atom feed documents into PaperRecord objects."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from arxiv_scroll.models import (
    NO_ABSTRACT,
    UNKNOWN_AUTHOR,
    UNTITLED_PAPER,
    PaperRecord,
)

logger = logging.getLogger(__name__)

# arXiv API / Atom parsing constants
ATOM_NS = {"atom": "http://www.w3.org/2005/Atom", "arxiv": "http://arxiv.org/schemas/atom"}
_FEED_TAG = f"{{{ATOM_NS['atom']}}}feed"
# The API reports bad queries as a single entry under this id prefix
_API_ERROR_ID_MARKER = "/api/errors"


def normalize_text(text: str | None) -> str:
    """Collapse runs of whitespace and trim."""
    if not text:
        return ""
    return " ".join(text.split())


def _atom_text(node: ET.Element, path: str) -> str:
    """Extract normalized text from an Atom XML node path."""
    found = node.find(path, ATOM_NS)
    if found is None:
        return ""
    return normalize_text(found.text)


def derive_pdf_url(entry_id: str, explicit_link: str = "") -> str:
    """Resolve the PDF link for an entry.

    Prefers the explicit ``title="pdf"`` link; otherwise rewrites the abstract
    URI (``/abs/`` -> ``/pdf/``). Empty when neither is available.
    """
    if explicit_link:
        return explicit_link
    if entry_id:
        return entry_id.replace("abs", "pdf", 1)
    return ""


def _entry_pdf_link(entry: ET.Element) -> str:
    for link in entry.findall("atom:link", ATOM_NS):
        if link.get("title") == "pdf":
            return (link.get("href") or "").strip()
    return ""


def parse_entry(entry: ET.Element) -> PaperRecord:
    """Translate one Atom ``<entry>`` element.

    Raises:
        ValueError: if the entry has no identifier or is an API error entry.
    """
    entry_id = _atom_text(entry, "atom:id")
    if not entry_id:
        raise ValueError("entry has no id")
    if _API_ERROR_ID_MARKER in entry_id:
        raise ValueError(f"API error entry: {_atom_text(entry, 'atom:summary')}")

    authors = tuple(
        name
        for name in (
            normalize_text(node.text) for node in entry.findall("atom:author/atom:name", ATOM_NS)
        )
        if name
    )

    categories: list[str] = []
    for category in entry.findall("atom:category", ATOM_NS):
        term = (category.get("term") or "").strip()
        if term and term not in categories:
            categories.append(term)

    published = _atom_text(entry, "atom:published") or None
    updated = _atom_text(entry, "atom:updated") or published

    return PaperRecord(
        id=entry_id,
        title=_atom_text(entry, "atom:title") or UNTITLED_PAPER,
        authors=authors or (UNKNOWN_AUTHOR,),
        abstract=_atom_text(entry, "atom:summary") or NO_ABSTRACT,
        published=published,
        updated=updated,
        categories=tuple(categories),
        pdf_url=derive_pdf_url(entry_id, _entry_pdf_link(entry)),
    )


def parse_feed(xml_text: str) -> list[PaperRecord]:
    """Parse an arXiv Atom feed into PaperRecord objects.

    Malformed entries are dropped and logged; the rest of the page survives.
    A feed without entries yields an empty list.

    Raises:
        ValueError: if the document is not well-formed XML or not an Atom feed.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ValueError("Invalid arXiv API XML response") from exc
    if root.tag != _FEED_TAG:
        raise ValueError(f"Expected an Atom feed, got <{root.tag}>")

    papers: list[PaperRecord] = []
    dropped = 0
    for entry in root.findall("atom:entry", ATOM_NS):
        try:
            papers.append(parse_entry(entry))
        except ValueError as exc:
            dropped += 1
            logger.warning("Dropping malformed feed entry: %s", exc)

    logger.debug("Parsed %d feed entries (%d dropped)", len(papers), dropped)
    return papers


__all__ = [
    "ATOM_NS",
    "derive_pdf_url",
    "normalize_text",
    "parse_entry",
    "parse_feed",
]
