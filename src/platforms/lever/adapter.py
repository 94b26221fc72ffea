"""Lever public postings adapter.

Like Greenhouse, the postings API is unfiltered, so matching and ranking
happen locally.

Docs: https://github.com/lever/postings-api
"""

import logging
from typing import Any

import httpx

from src.core.schemas import JobResult, SearchOptions
from src.pipeline.scorer import rank_by_query
from src.platforms.base import SourceAdapter
from src.platforms.normalize import epoch_ms_to_iso, is_remote_location

logger = logging.getLogger(__name__)

POSTINGS_URL = "https://api.lever.co/v0/postings/{site}"


def _description(posting: dict[str, Any]) -> str:
    return posting.get("descriptionPlain") or posting.get("description") or ""


def _match_text(posting: dict[str, Any]) -> tuple[str, str]:
    categories = posting.get("categories") or {}
    extra = " ".join([
        categories.get("location") or "",
        categories.get("team") or "",
        _description(posting),
    ])
    return posting.get("text") or "", extra


def _to_result(posting: dict[str, Any], site: str) -> JobResult | None:
    url = posting.get("hostedUrl") or posting.get("applyUrl")
    if not url:
        return None
    location = (posting.get("categories") or {}).get("location") or "Unknown"
    return JobResult(
        title=posting.get("text") or "Untitled",
        company=site,
        location=location,
        is_remote=is_remote_location(location),
        job_url=url,
        source="lever",
        date_posted=epoch_ms_to_iso(posting.get("createdAt")),
        description=_description(posting),
    )


class LeverAdapter(SourceAdapter):
    """Searches each site in ``options.lever_sites`` in turn."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def source_id(self) -> str:
        return "lever"

    def enabled_for(self, options: SearchOptions) -> bool:
        return bool(options.lever_sites)

    async def search(self, query: str, options: SearchOptions) -> list[JobResult]:
        results: list[JobResult] = []
        for site in options.lever_sites:
            try:
                postings = await self._fetch_site(site)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("lever: failed to fetch %s: %s", site, exc)
                continue

            for posting in rank_by_query(query, postings, _match_text):
                result = _to_result(posting, site)
                if result is not None:
                    results.append(result)
            logger.debug("lever site=%r: %d postings", site, len(postings))
        return results

    async def _fetch_site(self, site: str) -> list[dict[str, Any]]:
        r = await self._client.get(POSTINGS_URL.format(site=site), params={"mode": "json"})
        r.raise_for_status()
        data = r.json()
        if not isinstance(data, list):
            msg = f"expected a list of postings, got {type(data).__name__}"
            raise ValueError(msg)
        return data
