from datetime import timedelta

import pytest

from rondo.lib.durations import format_duration, parse_duration


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("45m", timedelta(minutes=45)),
        ("2h", timedelta(hours=2)),
        ("1.5h", timedelta(minutes=90)),
        ("90s", timedelta(seconds=90)),
        (" 1h 15m ", timedelta(hours=1, minutes=15)),
        ("2H", timedelta(hours=2)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "10", "1h30", "-5m", "m30"])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_format_duration():
    assert format_duration(timedelta(minutes=90)) == "1h 30m"
    assert format_duration(timedelta(hours=2)) == "2h"
    assert format_duration(timedelta(minutes=45)) == "45m"
    assert format_duration(timedelta()) == "0m"

