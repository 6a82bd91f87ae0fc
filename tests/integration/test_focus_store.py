from datetime import timedelta

import pytest

from rondo.core.errors import NotFoundError
from rondo.core.models import Session, Task
from rondo.lib import clock


def test_create_and_complete(focus, store, frozen_clock):
    task = store.create(Task(id=0, title="deep work"))
    session = focus.create(Session(id=0, started_at=clock.now(), task_id=task.id))
    assert session.id > 0
    frozen_clock.advance(minutes=25)
    focus.complete(session.id)
    (listed,) = focus.list_by_task(task.id)
    assert listed.completed_at == clock.now()
    assert listed.duration == timedelta(minutes=25)


def test_complete_missing_session(focus):
    with pytest.raises(NotFoundError):
        focus.complete(123)


def test_completions_by_day(focus, frozen_clock):
    for _ in range(2):
        s = focus.create(Session(id=0, started_at=clock.now()))
        focus.complete(s.id)
    frozen_clock.advance(days=1)
    focus.complete(focus.create(Session(id=0, started_at=clock.now())).id)
    focus.create(Session(id=0, started_at=clock.now()))

    counts = focus.completions_by_day(7)
    assert len(counts) == 7
    assert list(counts)[-1] == "2025-06-11"
    assert counts["2025-06-10"] == 2
    assert counts["2025-06-11"] == 1
    assert counts["2025-06-05"] == 0
    assert focus.today_count() == 1
