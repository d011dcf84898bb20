from datetime import date, datetime, timedelta, timezone

import pytest

from pointage.common.datetime_utils import iter_day_keys, to_day_key, to_iso_timestamp


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-10", "2024-01-10"),
        ("2024-01-10T23:30:00Z", "2024-01-10"),
        ("2024-01-10T23:30:00.000Z", "2024-01-10"),
        ("2024-01-11T01:00:00+02:00", "2024-01-10"),
        (date(2024, 1, 10), "2024-01-10"),
        (datetime(2024, 1, 10, 12, 0), "2024-01-10"),
        (datetime(2024, 1, 11, 3, 0, tzinfo=timezone(timedelta(hours=5))), "2024-01-10"),
    ],
)
def test_to_day_key_normalizes_to_utc_day(value, expected):
    assert to_day_key(value) == expected


def test_to_day_key_rejects_garbage():
    with pytest.raises(ValueError):
        to_day_key("not a date")
    with pytest.raises(TypeError):
        to_day_key(20240110)


def test_iso_timestamp_matches_stored_format():
    value = datetime(2024, 1, 10, 8, 0, 0, tzinfo=timezone.utc)
    assert to_iso_timestamp(value) == "2024-01-10T08:00:00.000Z"


def test_iter_day_keys_is_inclusive():
    assert list(iter_day_keys("2024-02-28", "2024-03-01")) == ["2024-02-28", "2024-02-29", "2024-03-01"]
    assert list(iter_day_keys("2024-03-02", "2024-03-01")) == []
