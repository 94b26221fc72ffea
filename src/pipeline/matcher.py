"""Deduplication of merged search results.

Results from all sources are flattened in source order and passed through
``URLDeduplicationFilter``: the first listing for a canonical URL wins, any
later one (from any source) is dropped without merging.
"""

import logging
import re

from src.core.schemas import JobResult

logger = logging.getLogger(__name__)

_QUERY_STRING = re.compile(r"\?.*$", re.DOTALL)
_TRAILING_SLASHES = re.compile(r"/+$")


def canonical_url(url: str) -> str:
    """Strip the query string and trailing slashes, then lower-case."""
    return _TRAILING_SLASHES.sub("", _QUERY_STRING.sub("", url)).lower()


class URLDeduplicationFilter:
    """Remove results whose canonical URL was already seen.

    Stateful: tracks seen URLs across calls within the same filter instance.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __call__(self, results: list[JobResult]) -> list[JobResult]:
        kept: list[JobResult] = []
        for r in results:
            key = canonical_url(r.job_url)
            if key not in self._seen:
                self._seen.add(key)
                kept.append(r)
        dropped = len(results) - len(kept)
        if dropped:
            logger.debug("URLDeduplicationFilter: removed %d duplicates", dropped)
        return kept


def dedupe_results(results: list[JobResult]) -> list[JobResult]:
    """One-shot dedup by canonical URL, keeping first occurrences in order."""
    return URLDeduplicationFilter()(results)

