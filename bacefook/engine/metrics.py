"""
bacefook.engine.metrics — Pure Graph-Metric Calculations
=========================================================

No DB I/O in here.  The services load counts and timestamps, this module
turns them into scores, page windows and day buckets.

Formulas:
  network strength = friends + direct referrals + (1 if referred by someone)
  total pages      = max(ceil(total / limit), 1)
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from bacefook.errors import ValidationError

__all__ = [
    "PageWindow",
    "as_utc",
    "bucket_by_day",
    "network_strength",
    "paginate",
    "parse_instant",
    "parse_window",
]


# ---------------------------------------------------------------------------
# Network strength
# ---------------------------------------------------------------------------
def network_strength(friend_count: int, referral_count: int, has_referrer: bool) -> int:
    """Score a user's reach from its immediate adjacency only."""
    return friend_count + referral_count + (1 if has_referrer else 0)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PageWindow:
    """Resolved page after clamping."""

    page: int
    limit: int
    total: int
    total_pages: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(total: int, page: int, limit: int, max_limit: int | None = None) -> PageWindow:
    """Clamp *page*/*limit* and derive the page count.

    ``limit`` is clamped to ``[1, max_limit]`` and ``page`` to
    ``[1, total_pages]``.  An empty result still has one (empty) page.
    """
    limit = max(int(limit), 1)
    if max_limit is not None:
        limit = min(limit, max_limit)
    total_pages = max(math.ceil(total / limit), 1)
    page = min(max(int(page), 1), total_pages)
    return PageWindow(page=page, limit=limit, total=total, total_pages=total_pages)


# ---------------------------------------------------------------------------
# Time handling
# ---------------------------------------------------------------------------
def as_utc(value: datetime) -> datetime:
    """Normalise to an aware UTC datetime.

    SQLite hands back naive datetimes; everything stored is UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_instant(value: str | datetime | None, name: str) -> datetime:
    """Parse an ISO-8601 date or datetime into an aware UTC datetime.

    A bare date (``2025-07-01``) is midnight UTC of that day.
    """
    if value is None or value == "":
        raise ValidationError(f"Query parameter '{name}' is required")
    if isinstance(value, datetime):
        return as_utc(value)
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(
            f"Query parameter '{name}' must be an ISO-8601 date or datetime, got {value!r}"
        ) from None
    return as_utc(parsed)


def parse_window(
    from_: str | datetime | None,
    to: str | datetime | None,
    *,
    required: bool = True,
) -> tuple[datetime | None, datetime | None]:
    """Parse an inclusive ``[from, to]`` window.

    With ``required=False`` either bound may be omitted (open-ended).
    """
    start = parse_instant(from_, "from") if (required or from_) else None
    end = parse_instant(to, "to") if (required or to) else None
    if start is not None and end is not None and start > end:
        raise ValidationError("'from' must not be later than 'to'")
    return start, end


def bucket_by_day(timestamps: Iterable[datetime]) -> list[dict[str, int | str]]:
    """Group timestamps by UTC calendar day.

    Returns a sparse ``[{"date": "YYYY-MM-DD", "count": n}]`` list sorted
    ascending by date; days with no activity are omitted.
    """
    counts = Counter(as_utc(ts).strftime("%Y-%m-%d") for ts in timestamps)
    return [{"date": day, "count": counts[day]} for day in sorted(counts)]
