from datetime import timedelta

import pytest

from ilm.util.units import parse_byte_size, parse_time_value


@pytest.mark.parametrize(
    "text,expected",
    [
        ("30d", timedelta(days=30)),
        ("12h", timedelta(hours=12)),
        ("15m", timedelta(minutes=15)),
        ("500ms", timedelta(milliseconds=500)),
        (90, timedelta(seconds=90)),
    ],
)
def test_parse_time_value(text, expected):
    assert parse_time_value(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [("50gb", 50 * 1024**3), ("1.5kb", 1536), ("10", 10), (2048, 2048), ("3MB", 3 * 1024**2)],
)
def test_parse_byte_size(text, expected):
    assert parse_byte_size(text) == expected


@pytest.mark.parametrize("bad", ["", "abc", "10parsecs", "-5d", -1])
def test_invalid_values(bad):
    with pytest.raises(ValueError):
        parse_time_value(bad)
