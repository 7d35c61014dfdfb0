"""
Tests for search matching and ranking.
"""
from datetime import datetime

from stak.models import Entry, EntryKind
from stak.search import matches_query, rank_entries, score_entry


def entry(entry_id, content, hour=9, **kwargs):
    when = datetime(2024, 3, 15, hour, 0)
    return Entry(id=entry_id, content=content, created_at=when, updated_at=when, **kwargs)


def test_matches_each_field():
    assert matches_query(entry("a", "Learn Rust"), "rust")
    assert matches_query(entry("b", "x", tags=["rust"]), "rust")
    assert matches_query(entry("c", "x", url="https://rust-lang.org"), "rust")
    assert matches_query(entry("d", "x", url_title="Rust Programming"), "rust")
    assert not matches_query(entry("e", "python"), "rust")


def test_prefix_match_scores_higher():
    assert score_entry(entry("a", "rust book"), "rust") > score_entry(entry("b", "the rust book"), "rust")


def test_rank_orders_by_score_then_recency():
    weak_old = entry("a", "about rust", hour=8)
    weak_new = entry("b", "about rust", hour=10)
    strong = entry("c", "rust everywhere", hour=7, tags=["rust"], kind=EntryKind.NOTE)
    miss = entry("d", "python", hour=11)
    ranked = rank_entries([weak_old, miss, weak_new, strong], "Rust")
    assert [e.id for e in ranked] == ["c", "b", "a"]


def test_empty_query_sorts_by_recency():
    ranked = rank_entries([entry("a", "x", hour=8), entry("b", "y", hour=10)], "  ")
    assert [e.id for e in ranked] == ["b", "a"]
