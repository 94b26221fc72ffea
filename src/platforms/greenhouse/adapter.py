"""Greenhouse public job board adapter.

The boards API returns every open posting on a board, so listings are
filtered and ranked locally against the query.

Docs: https://developers.greenhouse.io/job-board.html
"""

import logging
from typing import Any

import httpx

from src.core.schemas import JobResult, SearchOptions
from src.pipeline.scorer import rank_by_query
from src.platforms.base import SourceAdapter
from src.platforms.normalize import is_remote_location

logger = logging.getLogger(__name__)

BOARD_URL = "https://boards-api.greenhouse.io/v1/boards/{board}/jobs"


def _match_text(job: dict[str, Any]) -> tuple[str, str]:
    location = (job.get("location") or {}).get("name") or ""
    return job.get("title") or "", f"{location} {job.get('content') or ''}"


def _to_result(job: dict[str, Any], board: str) -> JobResult | None:
    url = job.get("absolute_url")
    if not url:
        return None
    location = (job.get("location") or {}).get("name") or "Unknown"
    return JobResult(
        title=job.get("title") or "Untitled",
        company=board,
        location=location,
        is_remote=is_remote_location(location),
        job_url=url,
        source="greenhouse",
        date_posted=job.get("updated_at"),
        description=job.get("content") or "",
    )


class GreenhouseAdapter(SourceAdapter):
    """Searches each board in ``options.greenhouse_boards`` in turn.

    Requires an httpx.AsyncClient injected via constructor. A board that
    fails is logged and skipped; the others still contribute.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def source_id(self) -> str:
        return "greenhouse"

    def enabled_for(self, options: SearchOptions) -> bool:
        return bool(options.greenhouse_boards)

    async def search(self, query: str, options: SearchOptions) -> list[JobResult]:
        results: list[JobResult] = []
        for board in options.greenhouse_boards:
            try:
                jobs = await self._fetch_board(board)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("greenhouse: failed to fetch %s: %s", board, exc)
                continue

            for job in rank_by_query(query, jobs, _match_text):
                result = _to_result(job, board)
                if result is not None:
                    results.append(result)
            logger.debug("greenhouse board=%r: %d postings", board, len(jobs))
        return results

    async def _fetch_board(self, board: str) -> list[dict[str, Any]]:
        r = await self._client.get(BOARD_URL.format(board=board), params={"content": "true"})
        r.raise_for_status()
        data = r.json()
        if not isinstance(data, dict):
            msg = f"expected a board object, got {type(data).__name__}"
            raise ValueError(msg)
        return list(data.get("jobs") or [])
