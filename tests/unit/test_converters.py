from datetime import date, datetime, timedelta

from rondo.core.models import Priority, RecurFreq, Status
from rondo.lib.converters import (
    _parse_date,
    _parse_datetime,
    _parse_datetime_optional,
    row_to_session,
    row_to_task,
    row_to_time_log,
)


def test_parse_date():
    assert _parse_date("2025-10-30") == date(2025, 10, 30)
    assert _parse_date("2025-10-30T14:30:00") == date(2025, 10, 30)
    assert _parse_date("") is None
    assert _parse_date(None) is None


def test_parse_datetime():
    assert _parse_datetime("2025-10-30T14:30:00") == datetime(2025, 10, 30, 14, 30)
    assert _parse_datetime(None) == datetime.min
    assert _parse_datetime_optional("") is None


def test_row_to_task():
    row = (5, "Pay rent", None, 1, 3, "2025-07-01", 3, 0, "2025-06-01T08:00:00", "2025-06-02T08:00:00")
    task = row_to_task(row)
    assert task.id == 5
    assert task.description == ""
    assert task.status is Status.IN_PROGRESS
    assert task.priority is Priority.URGENT
    assert task.due_date == date(2025, 7, 1)
    assert task.recur_freq is RecurFreq.MONTHLY
    assert task.recur_interval == 1
    assert task.subtasks == []


def test_row_to_time_log_seconds():
    log = row_to_time_log((1, 2, 5400, None, "2025-06-01T08:00:00"))
    assert log.duration == timedelta(minutes=90)
    assert log.note == ""


def test_row_to_session_without_task():
    s = row_to_session((1, None, 1500, "2025-06-01T08:00:00", None))
    assert s.task_id is None
    assert s.duration == timedelta(minutes=25)
    assert s.completed_at is None
