"""Query relevance scoring for job listings.

Every meaningful query word must occur somewhere in title + extra text
(AND semantics). Each word found in the title is worth 2, each word found
only in the extra text is worth 1. A score of 0 means no match.

Seniority words ("senior", "lead", ...) are qualifiers: they score when
present but a listing without them can still match, so "senior backend
engineer" finds a plain "Backend Engineer". A query made only of seniority
words still requires them.
"""

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

STOPWORDS = frozenset(
    {"a", "an", "the", "in", "at", "for", "and", "or", "of", "with", "to", "on", "is"}
)

SENIORITY_KEYWORDS = frozenset(
    {"junior", "senior", "staff", "principal", "lead", "director", "head", "vp", "sr", "jr"}
)


def query_terms(query: str) -> list[str]:
    """Lower-cased whitespace tokens, dropping stopwords and 1-char tokens."""
    return [w for w in query.lower().split() if len(w) > 1 and w not in STOPWORDS]


def match_score(query: str, title: str, extra_text: str = "") -> int:
    """Score how well a listing matches ``query``. 0 means no match.

    A query with no meaningful words matches everything with score 1.
    """
    words = query_terms(query)
    if not words:
        return 1

    title_lower = title.lower()
    full_text = f"{title_lower} {extra_text.lower()}"

    required = [w for w in words if w not in SENIORITY_KEYWORDS] or words
    if any(w not in full_text for w in required):
        return 0

    title_hits = sum(1 for w in words if w in title_lower)
    full_hits = sum(1 for w in words if w in full_text)
    return title_hits * 2 + (full_hits - title_hits)


def rank_by_query(
    query: str,
    items: Iterable[T],
    text_of: Callable[[T], tuple[str, str]],
) -> list[T]:
    """Keep items that match ``query``, best first.

    ``text_of`` returns (title, extra_text) for an item. The sort is stable,
    so equal scores keep their original order.
    """
    scored = [(match_score(query, *text_of(item)), item) for item in items]
    matched = [(score, item) for score, item in scored if score > 0]
    matched.sort(key=lambda pair: pair[0], reverse=True)
    dropped = len(scored) - len(matched)
    if dropped:
        logger.debug("rank_by_query: %d of %d did not match %r", dropped, len(scored), query)
    return [item for _, item in matched]
