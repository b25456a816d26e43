from datetime import timedelta

import pytest

from notary_admin.utils.timezone import convert_time_to_notary_timezone, format_12h, resolve_timezone


@pytest.mark.parametrize(
    "hour, minute, expected",
    [(0, 0, "12:00 AM"), (9, 5, "9:05 AM"), (12, 15, "12:15 PM"), (23, 59, "11:59 PM")],
)
def test_format_12h(hour, minute, expected):
    assert format_12h(hour, minute) == expected


class TestConvert:
    def test_utc_offsets(self):
        assert convert_time_to_notary_timezone("14:30", "2025-03-10", "UTC", "UTC+1") == "3:30 PM"
        assert convert_time_to_notary_timezone("14:30", "2025-03-10", "UTC-5:30", "UTC+1") == "9:00 PM"

    def test_iana_names(self):
        assert convert_time_to_notary_timezone("14:30", "2025-03-10", "America/New_York", "Europe/Paris") == "7:30 PM"

    def test_crosses_midnight(self):
        assert convert_time_to_notary_timezone("23:00", "2025-06-01", "UTC", "UTC+2") == "1:00 AM"

    def test_missing_parameters_format_raw_time(self):
        assert convert_time_to_notary_timezone("09:05", None, "UTC", "UTC+1") == "9:05 AM"
        assert convert_time_to_notary_timezone(None, "2025-03-10", "UTC", "UTC+1") == "12:00 AM"

    def test_unknown_timezone(self):
        assert convert_time_to_notary_timezone("14:30", "2025-03-10", "Mars/Olympus", "UTC") == "2:30 PM"


def test_resolve_offset():
    assert resolve_timezone("UTC-5:30").utcoffset(None) == -timedelta(hours=5, minutes=30)
    assert resolve_timezone("") is None
