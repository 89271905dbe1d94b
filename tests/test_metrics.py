"""
tests/test_metrics.py — Pure Metric Helper Tests
=================================================
Covers the DB-free helpers in bacefook.engine.metrics: the network-strength
formula, page clamping, date-window parsing and daily bucketing.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from bacefook.engine.metrics import (
    as_utc,
    bucket_by_day,
    network_strength,
    paginate,
    parse_instant,
    parse_window,
)
from bacefook.errors import ValidationError


class TestNetworkStrength:
    def test_isolated_user_is_zero(self):
        assert network_strength(0, 0, False) == 0

    def test_referrer_adds_one(self):
        assert network_strength(0, 0, True) == 1

    def test_sums_friends_and_referrals(self):
        assert network_strength(3, 2, True) == 6


class TestPaginate:
    def test_basic_window(self):
        w = paginate(total=25, page=2, limit=10)
        assert (w.page, w.limit, w.total_pages, w.offset) == (2, 10, 3, 10)

    def test_empty_result_has_one_page(self):
        w = paginate(total=0, page=1, limit=10)
        assert w.total_pages == 1
        assert w.offset == 0

    def test_page_clamped_to_last(self):
        w = paginate(total=25, page=99, limit=10)
        assert w.page == 3
        assert w.offset == 20

    def test_page_below_one_clamped(self):
        assert paginate(total=5, page=-4, limit=2).page == 1

    def test_limit_clamped_to_range(self):
        assert paginate(total=5, page=1, limit=0).limit == 1
        assert paginate(total=500, page=1, limit=1000, max_limit=100).limit == 100

    def test_exact_multiple(self):
        assert paginate(total=20, page=1, limit=10).total_pages == 2


class TestParseInstant:
    def test_bare_date_is_utc_midnight(self):
        assert parse_instant("2025-07-01", "from") == datetime(2025, 7, 1, tzinfo=UTC)

    def test_offset_datetime_converted_to_utc(self):
        parsed = parse_instant("2025-07-01T02:00:00+02:00", "to")
        assert parsed == datetime(2025, 7, 1, 0, 0, tzinfo=UTC)
        assert parsed.tzinfo == UTC

    def test_naive_datetime_treated_as_utc(self):
        assert parse_instant(datetime(2025, 1, 1, 8), "from") == datetime(2025, 1, 1, 8, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_rejected(self, value):
        with pytest.raises(ValidationError, match="'from' is required"):
            parse_instant(value, "from")

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="ISO-8601"):
            parse_instant("yesterday", "to")


class TestParseWindow:
    def test_inverted_window_rejected(self):
        with pytest.raises(ValidationError):
            parse_window("2025-07-02", "2025-07-01")

    def test_single_instant_window_allowed(self):
        start, end = parse_window("2025-07-01", "2025-07-01")
        assert start == end

    def test_optional_bounds(self):
        assert parse_window(None, None, required=False) == (None, None)
        start, end = parse_window("2025-07-01", None, required=False)
        assert start == datetime(2025, 7, 1, tzinfo=UTC)
        assert end is None

    def test_required_bounds(self):
        with pytest.raises(ValidationError, match="'to' is required"):
            parse_window("2025-07-01", None)


class TestBucketByDay:
    def test_groups_and_sorts(self):
        stamps = [
            datetime(2025, 7, 2, 9, tzinfo=UTC),
            datetime(2025, 7, 1, 23, 59, tzinfo=UTC),
            datetime(2025, 7, 2, 18, tzinfo=UTC),
        ]
        assert bucket_by_day(stamps) == [
            {"date": "2025-07-01", "count": 1},
            {"date": "2025-07-02", "count": 2},
        ]

    def test_sparse_days_omitted(self):
        stamps = [datetime(2025, 7, 1, tzinfo=UTC), datetime(2025, 7, 5, tzinfo=UTC)]
        assert [b["date"] for b in bucket_by_day(stamps)] == ["2025-07-01", "2025-07-05"]

    def test_buckets_by_utc_day(self):
        # 01:30 at +03:00 is still the previous day in UTC.
        local = datetime(2025, 7, 2, 1, 30, tzinfo=timezone(timedelta(hours=3)))
        assert bucket_by_day([local]) == [{"date": "2025-07-01", "count": 1}]

    def test_empty(self):
        assert bucket_by_day([]) == []


def test_as_utc_naive_and_aware():
    naive = datetime(2025, 1, 1, 12)
    assert as_utc(naive).tzinfo == UTC
    aware = datetime(2025, 1, 1, 12, tzinfo=timezone(timedelta(hours=-5)))
    assert as_utc(aware).hour == 17
