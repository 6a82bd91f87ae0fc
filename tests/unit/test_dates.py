from datetime import date, timedelta

from rondo.lib.dates import DueLevel, due_level, format_timer, note_title, parse_due_date

TODAY = date(2025, 6, 10)


def test_due_level():
    assert due_level(None, TODAY) is DueLevel.NONE
    assert due_level(TODAY - timedelta(days=1), TODAY) is DueLevel.OVERDUE
    assert due_level(TODAY, TODAY) is DueLevel.TODAY
    assert due_level(TODAY + timedelta(days=3), TODAY) is DueLevel.SOON
    assert due_level(TODAY + timedelta(days=4), TODAY) is DueLevel.FAR


def test_parse_relative_dates(frozen_clock):
    # frozen clock is Tuesday 2025-06-10
    assert parse_due_date("today") == TODAY
    assert parse_due_date("Tomorrow") == date(2025, 6, 11)
    assert parse_due_date("fri") == date(2025, 6, 13)
    assert parse_due_date("tuesday") == date(2025, 6, 17)


def test_parse_explicit_dates(frozen_clock):
    assert parse_due_date("2025-07-01") == date(2025, 7, 1)
    assert parse_due_date("") is None
    assert parse_due_date("not a date") is None
    assert parse_due_date("10:30") is None


def test_month_name_is_not_a_weekday(frozen_clock):
    assert parse_due_date("month") is None


def test_note_title():
    assert note_title(TODAY, TODAY) == "Today"
    assert note_title(date(2025, 6, 9), TODAY) == "Yesterday"
    assert note_title(date(2025, 6, 1), TODAY) == "Sun, Jun 01"
    assert note_title(date(2024, 12, 31), TODAY) == "Tue, Dec 31 2024"


def test_format_timer():
    assert format_timer(timedelta(minutes=25)) == "25:00"
    assert format_timer(timedelta(seconds=61)) == "01:01"
    assert format_timer(timedelta(seconds=-5)) == "00:00"
