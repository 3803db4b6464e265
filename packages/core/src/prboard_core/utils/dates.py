from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from prboard_core.models import DateFilter

_FILTER_DAYS = {"week": 7, "two_weeks": 14}


def filter_days(date_filter: DateFilter) -> int | None:
    """Number of days covered by a recency filter, or None for "all"."""
    if date_filter == "all":
        return None
    if date_filter not in _FILTER_DAYS:
        raise ValueError(f"Unknown date filter: {date_filter!r}. Choose 'all', 'week' or 'two_weeks'.")
    return _FILTER_DAYS[date_filter]


def date_filter_query(date_filter: DateFilter, today: Optional[date] = None) -> str:
    """Return the search qualifier for a recency filter, e.g. `` updated:>=2025-05-12``."""
    days = filter_days(date_filter)
    if days is None:
        return ""
    today = today or datetime.now(timezone.utc).date()
    since = today - timedelta(days=days)
    return f" updated:>={since.isoformat()}"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp (``2025-05-19T10:00:00Z``)."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def ensure_aware(value: datetime) -> datetime:
    # Older PyGithub releases hand back naive UTC datetimes.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
