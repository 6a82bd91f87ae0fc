import io
import json
from datetime import date

import pytest
import yaml

from rondo.core.models import Priority, Status, Task
from rondo.export import Format, export_payload, export_to_file, write_export


def sample(store, journal):
    task = store.create(
        Task(id=0, title="Ship it", priority=Priority.URGENT, due_date=date(2025, 7, 1), tags=["work"])
    )
    store.add_subtask(task.id, "tests")
    store.cycle_status(store.create(Task(id=0, title="Old chore")).id)
    note = journal.get_or_create_today()
    journal.add_entry(note.id, "felt good")
    return store.list_tasks(), journal.list_notes()


def test_format_parse():
    assert Format.parse("MD") is Format.MARKDOWN
    assert Format.parse("yml") is Format.YAML
    with pytest.raises(ValueError):
        Format.parse("csv")


def test_markdown_export(store, journal):
    tasks, notes = sample(store, journal)
    out = io.StringIO()
    write_export(out, Format.MARKDOWN, tasks, notes)
    text = out.getvalue()
    assert text.startswith("# Tasks\n")
    assert "- [ ] **Ship it** (Urgent | Pending | due 2025-07-01 | tags: work)" in text
    assert "  - [ ] tests" in text
    assert "# Journal" in text
    assert "felt good" in text


def test_json_and_yaml_share_structure(store, journal):
    tasks, notes = sample(store, journal)
    out = io.StringIO()
    write_export(out, Format.JSON, tasks, None)
    data = json.loads(out.getvalue())
    assert "journal" not in data
    by_title = {t["title"]: t for t in data["tasks"]}
    assert by_title["Ship it"]["priority"] == "Urgent"
    assert by_title["Old chore"]["status"] == Status.IN_PROGRESS.label

    out = io.StringIO()
    write_export(out, Format.YAML, tasks, notes)
    assert yaml.safe_load(out.getvalue()) == export_payload(tasks, notes)


def test_export_to_file(store, journal, tmp_path, frozen_clock):
    tasks, _ = sample(store, journal)
    path = export_to_file(Format.JSON, tasks, export_dir=tmp_path / "out")
    assert path.name == "export-2025-06-10.json"
    assert len(json.loads(path.read_text())["tasks"]) == 2
