"""Unit tests for the FTS strategy builders and query helpers."""

import pytest

from recipebox.search import (
    all_terms_strategy,
    any_terms_strategy,
    build_match_expressions,
    escape_like,
    phrase_strategy,
    prefix_strategy,
    sanitize_query,
    split_terms,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("chicken", "chicken"),
        ("  mac & cheese!  ", "mac  cheese"),
        ('"quoted" OR*', "quoted OR"),
        ("???", ""),
        ("crème brûlée", "crme brle"),
    ],
)
def test_sanitize_query(raw, expected):
    assert sanitize_query(raw) == expected


def test_split_terms_collapses_whitespace():
    assert split_terms("mac  cheese\tbake") == ["mac", "cheese", "bake"]


def test_single_term_strategies():
    terms = ["chicken"]
    assert phrase_strategy(terms) == '"chicken"'
    assert all_terms_strategy(terms) is None
    assert prefix_strategy(terms) == '"chicken"*'
    assert any_terms_strategy(terms) is None


def test_short_single_term_has_no_prefix_strategy():
    assert prefix_strategy(["ox"]) is None


def test_multi_term_strategies():
    terms = ["chicken", "masala"]
    assert phrase_strategy(terms) == '"chicken masala"'
    assert all_terms_strategy(terms) == '"chicken" AND "masala"'
    assert prefix_strategy(terms) is None
    assert any_terms_strategy(terms) == '"chicken" OR "masala"'


def test_build_match_expressions_order():
    assert build_match_expressions(["chicken"]) == ['"chicken"', '"chicken"*']
    assert build_match_expressions(["red", "curry"]) == [
        '"red curry"',
        '"red" AND "curry"',
        '"red" OR "curry"',
    ]
    assert build_match_expressions([]) == []


def test_operator_words_are_quoted():
    # Bare AND/OR/NOT would be read as FTS operators
    assert all_terms_strategy(["salt", "AND", "pepper"]) == '"salt" AND "AND" AND "pepper"'


def test_escape_like():
    assert escape_like("100%_done\\") == "100\\%\\_done\\\\"
