import json
from datetime import date

import pytest

from rondo.core.errors import ValidationError
from rondo.core.models import Priority, RecurFreq, Status, Task
from rondo.tasks import add_task, format_task, list_tasks, render_tasks


def test_add_task_parses_flags(store, frozen_clock):
    task = add_task("  Call mum ", priority="high", due="tomorrow", tags="family, phone", store=store)
    assert task.title == "Call mum"
    assert task.priority is Priority.HIGH
    assert task.due_date == date(2025, 6, 11)
    assert task.tags == ["family", "phone"]


@pytest.mark.parametrize(
    "kwargs",
    [{"title": " "}, {"title": "x", "priority": "huge"}, {"title": "x", "due": "whenever"}],
)
def test_add_task_rejects_bad_input(store, kwargs):
    with pytest.raises(ValidationError):
        add_task(store=store, **kwargs)


def test_list_tasks_filters(store):
    open_task = add_task("open", store=store)
    done = add_task("done", store=store)
    store.complete(done.id)
    assert [t.id for t in list_tasks("active", store)] == [open_task.id]
    assert [t.id for t in list_tasks("done", store)] == [done.id]
    assert len(list_tasks("all", store)) == 2
    with pytest.raises(ValidationError):
        list_tasks("later", store)


def test_format_task():
    task = Task(
        id=7,
        title="Rent",
        status=Status.IN_PROGRESS,
        priority=Priority.URGENT,
        due_date=date(2025, 7, 1),
        recur_freq=RecurFreq.MONTHLY,
        tags=["home"],
    )
    assert format_task(task) == "◐ #7 Rent [URG!] due 2025-07-01 (monthly) #home"
    every_two = Task(id=8, title="Water", recur_freq=RecurFreq.WEEKLY, recur_interval=2)
    assert format_task(every_two) == "○ #8 Water [LOW] (every 2 weekly)"


def test_pending_filter_excludes_in_progress(store):
    waiting = add_task("waiting", store=store)
    started = add_task("started", store=store)
    store.cycle_status(started.id)
    assert [t.id for t in list_tasks("pending", store)] == [waiting.id]
    assert {t.id for t in list_tasks("active", store)} == {waiting.id, started.id}


def test_render_tasks_json(store):
    task = add_task("Ship", priority="urgent", tags="work", store=store)
    (data,) = json.loads(render_tasks([task], "json"))
    assert data["id"] == task.id
    assert data["priority"] == "Urgent"
    assert data["tags"] == ["work"]
    assert json.loads(render_tasks([], "json")) == []


def test_render_tasks_text(store):
    assert render_tasks([]) == "no tasks"
    task = add_task("Ship", store=store)
    assert task.priority is Priority.MEDIUM
    assert render_tasks([task]) == format_task(task)
    with pytest.raises(ValidationError):
        render_tasks([task], "xml")
