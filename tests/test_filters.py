from datetime import datetime, timezone

import pytest

from notary_admin.exceptions import ValidationError
from notary_admin.services.filters import filter_rows, paginate, parse_timestamp, period_start

NOW = datetime(2026, 10, 17, 15, 0, tzinfo=timezone.utc)

ROWS = [
    {"id": "1", "first_name": "Alice", "email": "alice@example.com", "status": "pending", "created_at": "2026-10-17T08:00:00Z"},
    {"id": "2", "first_name": "Bob", "email": "bob@example.com", "status": "confirmed", "created_at": "2026-10-12T08:00:00+00:00"},
    {"id": "3", "first_name": "Chloé", "email": "chloe@example.com", "status": "pending", "created_at": 1788000000},
]


class TestFilterRows:
    def test_search_is_case_insensitive(self):
        rows = filter_rows(ROWS, search="ALICE", search_fields=("first_name", "email"))
        assert [row["id"] for row in rows] == ["1"]

    def test_status(self):
        assert [row["id"] for row in filter_rows(ROWS, status="pending")] == ["1", "3"]
        assert len(filter_rows(ROWS, status="all")) == 3

    def test_period_today(self):
        rows = filter_rows(ROWS, date_field="created_at", period="today", now=NOW)
        assert [row["id"] for row in rows] == ["1"]

    def test_period_week(self):
        rows = filter_rows(ROWS, date_field="created_at", period="week", now=NOW)
        assert [row["id"] for row in rows] == ["1", "2"]

    def test_period_month_with_epoch_seconds(self):
        # 1788000000 -> 2026-08-29
        rows = filter_rows(ROWS, date_field="created_at", period="month", now=NOW)
        assert [row["id"] for row in rows] == ["1", "2"]

    def test_invalid_period(self):
        with pytest.raises(ValidationError):
            filter_rows(ROWS, period="decade")


class TestPaginate:
    def test_pages(self):
        rows = [{"id": str(i)} for i in range(25)]
        page = paginate(rows, page=3, per_page=10)
        assert page.total == 25
        assert page.total_pages == 3
        assert [row["id"] for row in page.items] == ["20", "21", "22", "23", "24"]

    def test_page_is_clamped(self):
        page = paginate([{"id": "1"}], page=9, per_page=10)
        assert page.page == 1
        assert page.items == [{"id": "1"}]

    def test_empty(self):
        page = paginate([], page=1, per_page=10)
        assert page.total_pages == 1
        assert page.items == []


def test_parse_timestamp():
    assert parse_timestamp("2026-10-17T08:00:00Z") == datetime(2026, 10, 17, 8, 0, tzinfo=timezone.utc)
    assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


class TestPeriodStart:
    def test_month_keeps_the_day_when_it_exists(self):
        now = datetime(2026, 1, 31, 12, 0, tzinfo=timezone.utc)
        assert period_start("month", now) == datetime(2025, 12, 31, 12, 0, tzinfo=timezone.utc)

    def test_month_clamps_to_last_day(self):
        now = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
        assert period_start("month", now) == datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc)

    def test_month_window_on_january_31(self):
        now = datetime(2026, 1, 31, 12, 0, tzinfo=timezone.utc)
        rows = [
            {"id": "old", "created_at": "2025-12-29T08:00:00+00:00"},
            {"id": "recent", "created_at": "2026-01-02T08:00:00+00:00"},
        ]
        kept = filter_rows(rows, date_field="created_at", period="month", now=now)
        assert [row["id"] for row in kept] == ["recent"]
