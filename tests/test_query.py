"""Tests for filter normalization and search query construction."""

from __future__ import annotations

import pytest

from arxiv_scroll.models import FilterScope
from arxiv_scroll.query import (
    DEFAULT_ROOT_QUERY,
    build_search_query,
    escape_query_text,
    format_query_label,
    normalize_scope,
)


class TestNormalizeScope:
    def test_empty_input_means_no_constraint(self) -> None:
        assert normalize_scope() == FilterScope("", ())

    def test_collapses_whitespace(self) -> None:
        scope = normalize_scope("  graph   neural\tnets ")
        assert scope.search_text == "graph neural nets"

    def test_maps_friendly_tags_and_dedups_in_order(self) -> None:
        scope = normalize_scope("", ["ml", "cs.CV", "cs.LG", " cv ", ""])
        assert scope.categories == ("cs.LG", "cs.CV")

    def test_codes_are_case_insensitive(self) -> None:
        assert normalize_scope("", ["CS.ai"]).categories == ("cs.AI",)

    def test_unknown_codes_pass_through(self) -> None:
        assert normalize_scope("", ["math.CO"]).categories == ("math.CO",)

    def test_rejects_unencodable_text(self) -> None:
        with pytest.raises(ValueError, match="Search text"):
            normalize_scope("bad \ud800 text")

    def test_equal_inputs_give_equal_scopes(self) -> None:
        assert normalize_scope(" a  b", ["ml"]) == normalize_scope("a b", ["cs.LG"])


class TestBuildSearchQuery:
    def test_default_root_query(self) -> None:
        assert build_search_query(FilterScope()) == DEFAULT_ROOT_QUERY

    def test_categories_are_or_joined(self) -> None:
        scope = FilterScope("", ("cs.LG", "cs.AI"))
        assert build_search_query(scope) == "cat:cs.LG OR cat:cs.AI"

    def test_single_category_with_text(self) -> None:
        scope = FilterScope("diffusion", ("cs.LG",))
        assert build_search_query(scope) == 'cat:cs.LG AND ti:"diffusion"'

    def test_multiple_categories_with_text_are_grouped(self) -> None:
        scope = FilterScope("diffusion", ("cs.LG", "cs.CV"))
        assert build_search_query(scope) == '(cat:cs.LG OR cat:cs.CV) AND ti:"diffusion"'

    def test_text_without_categories_uses_root(self) -> None:
        assert build_search_query(FilterScope("llm", ())) == f'{DEFAULT_ROOT_QUERY} AND ti:"llm"'

    def test_quotes_are_stripped_from_text(self) -> None:
        scope = FilterScope('say "hi"\\', ("cs.AI",))
        assert build_search_query(scope) == 'cat:cs.AI AND ti:"say hi"'

    def test_text_of_only_quotes_is_dropped(self) -> None:
        assert build_search_query(FilterScope('""', ("cs.AI",))) == "cat:cs.AI"


def test_escape_query_text_collapses_space() -> None:
    assert escape_query_text(' a  "b" ') == "a b"


@pytest.mark.parametrize(
    ("scope", "expected"),
    [
        (FilterScope(), "All recent papers"),
        (FilterScope("gan", ()), '"gan"'),
        (FilterScope("", ("cs.LG", "cs.AI")), "cs.LG, cs.AI"),
        (FilterScope("gan", ("cs.CV",)), '"gan" in cs.CV'),
    ],
)
def test_format_query_label(scope: FilterScope, expected: str) -> None:
    assert format_query_label(scope) == expected
