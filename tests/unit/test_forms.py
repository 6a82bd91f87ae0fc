from rondo.app.forms import (
    FormState,
    export_form,
    journal_form,
    parse_tags,
    subtask_form,
    task_form,
    time_log_form,
)
from rondo.app.messages import BlinkMsg, KeyMsg, ResizeMsg, Tick
from rondo.core.models import Priority, RecurFreq, Task


def press(form, *keys):
    for k in keys:
        form.update(KeyMsg(k))


def type_text(form, text):
    press(form, *("space" if c == " " else c for c in text))


def test_init_schedules_blink_for_this_form():
    form = subtask_form()
    (cmd,) = form.init()
    assert isinstance(cmd, Tick)
    assert cmd.msg == BlinkMsg(form.id)


def test_blink_toggles_cursor_and_reschedules():
    form = subtask_form()
    cmds = form.update(BlinkMsg(form.id))
    assert form.cursor_visible is False
    assert cmds == [Tick(0.5, BlinkMsg(form.id))]


def test_stale_blink_is_ignored():
    form = subtask_form()
    assert form.update(BlinkMsg(form.id + 1000)) == []
    assert form.cursor_visible is True


def test_blank_required_field_blocks_submit():
    form = subtask_form()
    press(form, "enter")
    assert form.state is FormState.ACTIVE
    assert form.fields[0].error == "cannot be empty"


def test_single_field_form_completes_on_enter():
    form = subtask_form()
    type_text(form, "buy bread")
    press(form, "enter")
    assert form.state is FormState.COMPLETED
    assert form.get("title") == "buy bread"


def test_backspace_and_ctrl_c():
    form = subtask_form()
    type_text(form, "abc")
    press(form, "backspace")
    assert form.get("title") == "ab"
    press(form, "ctrl+c")
    assert form.state is FormState.ABORTED


def test_task_form_walks_fields_and_cycles_selects():
    form = task_form()
    type_text(form, "Pay rent")
    press(form, "enter", "tab")  # title -> description -> priority
    assert form.focused.key == "priority"
    press(form, "right")
    press(form, "enter")
    type_text(form, "2025-07-01")
    press(form, "enter")
    type_text(form, "home, bills")
    press(form, "enter", "l", "l", "l", "enter")
    assert form.focused.key == "recur_interval"
    press(form, "enter")
    assert form.state is FormState.COMPLETED
    v = form.values()
    assert v["priority"] is Priority.HIGH
    assert v["recur_freq"] is RecurFreq.MONTHLY
    assert parse_tags(v["tags"]) == ["home", "bills"]


def test_task_form_rejects_bad_due_date():
    form = task_form()
    type_text(form, "x")
    press(form, "enter", "tab", "tab")
    type_text(form, "someday")
    press(form, "enter")
    assert form.focused.key == "due_date"
    assert form.focused.error


def test_edit_form_prefills_from_task():
    task = Task(id=3, title="Water plants", priority=Priority.MEDIUM, tags=["home"])
    form = task_form(task)
    assert form.title == "Edit Task"
    assert form.get("title") == "Water plants"
    assert form.get("tags") == "home"
    assert form.get("recur_interval") == ""


def test_text_field_accepts_newline_and_respects_limit():
    form = journal_form("a" * 1999)
    press(form, "b", "c")
    assert len(str(form.get("body"))) == 2000
    form = journal_form("line")
    press(form, "alt+enter")
    assert form.get("body") == "line\n"


def test_export_confirm_field():
    form = export_form()
    press(form, "l", "enter", "y", "enter")
    assert form.state is FormState.COMPLETED
    assert form.values() == {"format": "json", "include_journal": True}


def test_time_log_validates_duration():
    form = time_log_form()
    type_text(form, "soon")
    press(form, "enter")
    assert form.focused.key == "duration"
    assert form.focused.error


def test_resize_updates_width():
    form = subtask_form()
    form.update(ResizeMsg(120, 40))
    assert form.width == 120


def test_function_keys_are_not_typed():
    form = subtask_form()
    press(form, "f1", "ctrl+z", "x")
    assert form.get("title") == "x"


def test_add_form_defaults_to_medium_priority():
    assert task_form().get("priority") is Priority.MEDIUM
    low = Task(id=1, title="chore", priority=Priority.LOW)
    assert task_form(low).get("priority") is Priority.LOW
