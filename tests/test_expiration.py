from datetime import datetime, timedelta, timezone

import pytest

from osauth.token.expiration import (
    FOREVER,
    format_expiration,
    parse_expiration,
    is_expired,
    expiration_from_now,
    utc_now,
)


def test_format_utc_uses_z():
    value = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert format_expiration(value) == "2024-01-02T03:04:05Z"


def test_format_keeps_offset():
    value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))
    assert format_expiration(value) == "2024-01-02T03:04:05+02:00"


def test_format_naive_is_utc():
    assert format_expiration(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"


def test_parse_iso_round_trip():
    text = "2024-01-02T03:04:05Z"
    parsed = parse_expiration(text)
    assert parsed == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert format_expiration(parsed) == text


def test_parse_offset():
    parsed = parse_expiration("2024-01-02T03:04:05+02:00")
    assert parsed.utcoffset() == timedelta(hours=2)


def test_parse_lenient_formats():
    assert parse_expiration("01/02/2024 03:04:05") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_expiration("2024-01-02").year == 2024


@pytest.mark.parametrize("value", ["garbage", "", None, "2024-13-45T99:00:00Z"])
def test_parse_failure_is_forever(value):
    parsed = parse_expiration(value)
    assert parsed == FOREVER
    assert parsed.year == 2199


def test_parse_result_is_aware():
    assert parse_expiration("2024-01-02T03:04:05").tzinfo is not None


def test_is_expired():
    now = utc_now()
    assert is_expired(now - timedelta(seconds=1), now=now)
    assert not is_expired(now + timedelta(seconds=1), now=now)
    assert not is_expired(now - timedelta(seconds=1), now=now, clock_skew=timedelta(seconds=5))
    assert not is_expired(FOREVER)


def test_expiration_from_now():
    now = utc_now()
    assert expiration_from_now(timedelta(hours=4), now=now) == now + timedelta(hours=4)
