from datetime import datetime, timedelta

import pytest

from rondo.core.models import Priority, RecurFreq, Session, Status, Task, TimeLog


def test_status_cycle_has_period_three():
    for s in Status:
        assert s.next().next().next() is s
    assert Status.PENDING.next() is Status.IN_PROGRESS
    assert Status.DONE.next() is Status.PENDING


def test_priority_parse_accepts_names_and_badges():
    assert Priority.parse("high") is Priority.HIGH
    assert Priority.parse(" Med ") is Priority.MEDIUM
    assert Priority.parse("urg") is Priority.URGENT
    with pytest.raises(ValueError):
        Priority.parse("critical")


def test_priority_labels():
    assert Priority.HIGH.label == "High"
    assert Priority.URGENT.badge == "URG!"


def test_recur_freq_parse_unknown_is_none():
    assert RecurFreq.parse("Weekly") is RecurFreq.WEEKLY
    assert RecurFreq.parse("fortnightly") is RecurFreq.NONE


def test_task_total_logged():
    logs = [
        TimeLog(id=i, task_id=1, duration=timedelta(minutes=m), note="", logged_at=datetime.min)
        for i, m in enumerate([15, 30])
    ]
    assert Task(id=1, title="t", time_logs=logs).total_logged == timedelta(minutes=45)
    assert not Task(id=1, title="t").recurring


def test_session_remaining_is_bounded():
    start = datetime(2025, 6, 10, 9, 0)
    s = Session(id=1, started_at=start)
    assert s.remaining(start + timedelta(minutes=5)) == timedelta(minutes=20)
    assert s.remaining(start + timedelta(hours=2)) == timedelta()
    assert s.remaining(start - timedelta(minutes=1)) == timedelta(minutes=25)
