"""Helpers shared by adapters when mapping raw records to JobResult."""

import re
from datetime import datetime, timezone

from src.core.schemas import SalaryRange

_REMOTE = re.compile(r"remote", re.IGNORECASE)


def is_remote_location(location: str) -> bool:
    return bool(_REMOTE.search(location or ""))


def normalize_salary(
    min_amount: float | None,
    max_amount: float | None,
    interval: str | None = None,
    currency: str | None = None,
) -> SalaryRange | None:
    """Build a SalaryRange, or None when neither bound is known."""
    if min_amount is None and max_amount is None:
        return None
    return SalaryRange(
        min_amount=min_amount,
        max_amount=max_amount,
        interval=interval or None,
        currency=currency or None,
    )


def epoch_ms_to_iso(value: int | float | None) -> str | None:
    """Convert a millisecond Unix timestamp to an ISO-8601 UTC string."""
    if value is None:
        return None
    dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
