"""Orchestrator: cache, concurrent source adapters, flatten, dedup.

Data flow:
  1. Cache lookup on (query, options); a hit skips all network calls
  2. Every enabled adapter runs concurrently
  3. A failing adapter contributes no results; the rest still count
  4. Flatten in adapter order (not score order)
  5. Dedup by canonical URL, first occurrence wins
  6. Cache store
"""

import asyncio
import json
import logging

import httpx

from src.core.cache import SearchCache
from src.core.config import SearchSettings
from src.core.schemas import JobResult, SearchOptions
from src.pipeline.matcher import dedupe_results
from src.platforms.aggregated.adapter import JobSpyAdapter
from src.platforms.base import SourceAdapter
from src.platforms.greenhouse.adapter import GreenhouseAdapter
from src.platforms.lever.adapter import LeverAdapter

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 30 * 60


def build_adapters(client: httpx.AsyncClient) -> list[SourceAdapter]:
    """The default adapter set, in the order their results are merged."""
    return [JobSpyAdapter(), GreenhouseAdapter(client), LeverAdapter(client)]


def with_defaults(options: SearchOptions, settings: SearchSettings) -> SearchOptions:
    """Fill unset result count and empty board lists from settings."""
    update: dict[str, object] = {}
    if options.results is None:
        update["results"] = settings.results
    if not options.greenhouse_boards and settings.greenhouse_boards:
        update["greenhouse_boards"] = list(settings.greenhouse_boards)
    if not options.lever_sites and settings.lever_sites:
        update["lever_sites"] = list(settings.lever_sites)
    return options.model_copy(update=update) if update else options


class JobSearch:
    """Runs one query across every enabled source.

    Usage::

        async with httpx.AsyncClient(timeout=20) as client:
            searcher = JobSearch(build_adapters(client))
            jobs = await searcher.search("backend engineer", SearchOptions(remote=True))
    """

    def __init__(
        self,
        adapters: list[SourceAdapter],
        cache: SearchCache[list[JobResult]] | None = None,
    ) -> None:
        self._adapters = adapters
        self._cache = cache if cache is not None else SearchCache(CACHE_TTL_SECONDS)

    async def search(self, query: str, options: SearchOptions | None = None) -> list[JobResult]:
        options = options or SearchOptions()
        params = options.cache_key()

        cached = self._cache.get(query, params)
        if cached is not None:
            logger.info("Cached: %d results for %r", len(cached), query)
            return list(cached)

        active = [a for a in self._adapters if a.enabled_for(options)]
        logger.info(
            "Searching %r on %s", query, ", ".join(a.source_id for a in active) or "no sources",
        )
        batches = await asyncio.gather(*(self._run(a, query, options) for a in active))

        merged = [job for batch in batches for job in batch]
        deduped = dedupe_results(merged)
        logger.info("Search %r: %d raw, %d after dedup", query, len(merged), len(deduped))

        self._cache.set(query, params, deduped)
        return list(deduped)

    async def _run(
        self, adapter: SourceAdapter, query: str, options: SearchOptions,
    ) -> list[JobResult]:
        try:
            results = await adapter.search(query, options)
        except Exception as exc:
            logger.warning("%s error: %s", adapter.source_id, exc)
            return []
        logger.debug("%s returned %d results", adapter.source_id, len(results))
        return results


def export_results_json(results: list[JobResult]) -> str:
    """Export search results as a JSON string (camelCase keys)."""
    return json.dumps([r.model_dump(mode="json", by_alias=True) for r in results], indent=2)
