from __future__ import annotations

from datetime import date, datetime

import pytest

from opsdesk.common.datetime_utils import optional_date, optional_datetime, parse_iso_datetime, short_date
from opsdesk.core.exceptions import ValidationError
from opsdesk.services.dashboard_service import format_time_ago


def test_parse_iso_datetime_drops_zulu_and_offsets():
    assert parse_iso_datetime("2026-03-02T10:15:00Z") == datetime(2026, 3, 2, 10, 15)
    assert parse_iso_datetime("2026-03-02T10:15:00+05:45") == datetime(2026, 3, 2, 10, 15)


def test_optional_date_accepts_timestamp_prefix():
    assert optional_date("2026-03-02T10:00:00", "d") == date(2026, 3, 2)
    assert optional_date("", "d") is None
    with pytest.raises(ValidationError, match="d must be a date"):
        optional_date("02/03/2026", "d")


def test_optional_datetime_rejects_garbage():
    with pytest.raises(ValidationError, match="dueDate must be an ISO date/time"):
        optional_datetime("tomorrow", "dueDate")


def test_short_date_has_no_padding():
    assert short_date(date(2026, 3, 2)) == "3/2/2026"


@pytest.mark.parametrize(
    "moment, expected",
    [
        (datetime(2026, 3, 2, 8, 59, 30), "Just now"),
        (datetime(2026, 3, 2, 8, 15), "45m ago"),
        (datetime(2026, 3, 2, 3, 0), "6h ago"),
        (datetime(2026, 2, 27, 9, 0), "3d ago"),
        (datetime(2026, 2, 20, 9, 0), "2/20/2026"),
    ],
)
def test_format_time_ago(moment, expected, fixed_now):
    assert format_time_ago(moment, fixed_now) == expected
