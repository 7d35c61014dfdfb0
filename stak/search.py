"""
SEARCH HELPERS

Case-insensitive substring matching over an entry's content, tags, url and
url title, plus a simple relevance ranking for displaying results.
"""
from typing import List

from .models import Entry

# field weights used by score_entry
CONTENT_WEIGHT = 10
CONTENT_PREFIX_BONUS = 5
TAG_WEIGHT = 8
URL_WEIGHT = 6
URL_TITLE_WEIGHT = 7
KIND_WEIGHT = 3


def matches_query(entry: Entry, query: str) -> bool:
    """query must already be trimmed and lowercased."""
    if query in entry.content.lower():
        return True
    if any(query in tag.lower() for tag in entry.tags):
        return True
    return query in entry.url.lower() or query in entry.url_title.lower()


def score_entry(entry: Entry, query: str) -> int:
    score = 0
    content = entry.content.lower()
    if query in content:
        score += CONTENT_WEIGHT
        if content.startswith(query):
            score += CONTENT_PREFIX_BONUS
    score += TAG_WEIGHT * sum(1 for tag in entry.tags if query in tag.lower())
    if entry.url and query in entry.url.lower():
        score += URL_WEIGHT
    if entry.url_title and query in entry.url_title.lower():
        score += URL_TITLE_WEIGHT
    if entry.kind and query in entry.kind.lower():
        score += KIND_WEIGHT
    return score


def rank_entries(entries: List[Entry], query: str) -> List[Entry]:
    """Best match first; ties go to the most recent entry."""
    query = query.strip().lower()
    if not query:
        return sorted(entries, key=lambda e: e.created_at, reverse=True)
    scored = [(score_entry(e, query), e) for e in entries]
    scored = [pair for pair in scored if pair[0] > 0]
    scored.sort(key=lambda pair: (pair[0], pair[1].created_at), reverse=True)
    return [e for _, e in scored]
