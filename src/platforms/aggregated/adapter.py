"""Aggregated LinkedIn + Indeed adapter backed by python-jobspy.

jobspy filters server-side, so results are returned in the order the
boards gave them with no local ranking. ``scrape_jobs`` is blocking and
runs in a worker thread.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

import pandas as pd
from jobspy import scrape_jobs

from src.core.schemas import JobResult, SearchOptions
from src.platforms.base import SourceAdapter
from src.platforms.normalize import normalize_salary

logger = logging.getLogger(__name__)

SITES = ("linkedin", "indeed")
DEFAULT_RESULTS = 15


def _clean(value: Any) -> Any:
    """Map pandas missing markers (NaN, NaT, None) to None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _date_posted(value: Any) -> str | None:
    value = _clean(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value) if value is not None else None


def _to_result(row: dict[str, Any]) -> JobResult | None:
    url = _clean(row.get("job_url"))
    if not url:
        return None
    return JobResult(
        title=_clean(row.get("title")) or "Untitled",
        company=_clean(row.get("company")) or "Unknown",
        location=_clean(row.get("location")) or "Unknown",
        is_remote=bool(_clean(row.get("is_remote"))),
        job_url=str(url),
        source=_clean(row.get("site")) or "jobspy",
        date_posted=_date_posted(row.get("date_posted")),
        salary=normalize_salary(
            _clean(row.get("min_amount")),
            _clean(row.get("max_amount")),
            _clean(row.get("interval")),
            _clean(row.get("currency")),
        ),
        description=_clean(row.get("description")) or "",
    )


class JobSpyAdapter(SourceAdapter):
    """Scrapes LinkedIn and Indeed through jobspy.

    ``scrape`` defaults to ``jobspy.scrape_jobs`` and can be swapped in tests.
    """

    def __init__(self, scrape: Callable[..., pd.DataFrame] = scrape_jobs) -> None:
        self._scrape = scrape

    @property
    def source_id(self) -> str:
        return "jobspy"

    def enabled_for(self, options: SearchOptions) -> bool:
        return options.site is None or options.site in SITES

    def build_kwargs(self, query: str, options: SearchOptions) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "site_name": options.site if options.site in SITES else list(SITES),
            "search_term": query,
            "results_wanted": options.results or DEFAULT_RESULTS,
            "description_format": "markdown",
            "linkedin_fetch_description": True,
        }
        if options.location:
            kwargs["location"] = options.location
        if options.remote is not None:
            kwargs["is_remote"] = options.remote
        if options.job_type:
            kwargs["job_type"] = options.job_type
        if options.hours_old:
            kwargs["hours_old"] = options.hours_old
        return kwargs

    async def search(self, query: str, options: SearchOptions) -> list[JobResult]:
        kwargs = self.build_kwargs(query, options)
        frame = await asyncio.to_thread(self._scrape, **kwargs)
        if frame is None or frame.empty:
            return []

        results: list[JobResult] = []
        for row in frame.to_dict("records"):
            result = _to_result(row)
            if result is None:
                logger.debug("jobspy: skipping row without job_url")
                continue
            results.append(result)
        logger.debug("jobspy returned %d rows, kept %d", len(frame), len(results))
        return results
