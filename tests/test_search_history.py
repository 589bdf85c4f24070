"""Tests for the search history ledger."""

from datetime import datetime, timedelta

import pytest

from recipebox.errors import AuthenticationRequired
from recipebox.models import SearchHistory
from recipebox.search_history import (
    clear_history,
    delete_history_entry,
    list_history,
    record_search,
)


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com")


def test_record_inserts_then_increments(db, alice):
    assert record_search(db, alice.id, "Pad Thai", 3) is True
    assert record_search(db, alice.id, " pad thai ", 5) is True

    row = db.get(SearchHistory, (alice.id, "pad thai"))
    assert row.run_count == 2
    assert row.results_count == 5


def test_blank_query_is_ignored(db, alice):
    assert record_search(db, alice.id, "   ", 0) is False
    assert record_search(db, alice.id, None, 0) is False
    assert db.query(SearchHistory).count() == 0


def test_list_most_recent_first(db, alice, bob):
    now = datetime.utcnow()
    db.add_all([
        SearchHistory(user_id=alice.id, query="old", last_searched_at=now - timedelta(days=2)),
        SearchHistory(user_id=alice.id, query="new", last_searched_at=now),
        SearchHistory(user_id=alice.id, query="mid", last_searched_at=now - timedelta(days=1)),
        SearchHistory(user_id=bob.id, query="bobs", last_searched_at=now),
    ])
    db.commit()

    assert [h.query for h in list_history(db, alice.id)] == ["new", "mid", "old"]
    assert [h.query for h in list_history(db, alice.id, limit=2)] == ["new", "mid"]


def test_default_limit(db, alice):
    for i in range(10):
        record_search(db, alice.id, f"query {i}", i)

    assert len(list_history(db, alice.id)) == 8


def test_delete_entry_normalizes_query(db, alice, bob):
    record_search(db, alice.id, "Ramen", 1)
    record_search(db, bob.id, "ramen", 1)

    assert delete_history_entry(db, alice.id, "  RAMEN ") is True
    assert delete_history_entry(db, alice.id, "ramen") is False
    assert [h.query for h in list_history(db, bob.id)] == ["ramen"]


def test_delete_entry_requires_query(db, alice):
    with pytest.raises(ValueError):
        delete_history_entry(db, alice.id, "  ")


def test_clear_history_only_touches_caller(db, alice, bob):
    record_search(db, alice.id, "ramen", 1)
    record_search(db, alice.id, "tacos", 1)
    record_search(db, bob.id, "ramen", 1)

    assert clear_history(db, alice.id) == 2
    assert list_history(db, alice.id) == []
    assert len(list_history(db, bob.id)) == 1


def test_requires_user(db):
    with pytest.raises(AuthenticationRequired):
        list_history(db, None)
    with pytest.raises(AuthenticationRequired):
        clear_history(db, None)
