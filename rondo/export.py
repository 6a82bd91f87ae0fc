import json
import sys
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Any, TextIO

import yaml
from fncli import UsageError, cli

from . import config
from .core.models import Note, Status, Task
from .journal import JournalStore
from .lib import clock
from .lib.durations import format_duration
from .tasks import TaskStore, task_to_dict

__all__ = [
    "Format",
    "export_path",
    "export_payload",
    "export_to_file",
    "write_export",
    "write_json",
    "write_notes",
    "write_tasks",
    "write_yaml",
]


class Format(StrEnum):
    MARKDOWN = "md"
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def parse(cls, value: str) -> "Format":
        key = value.strip().lower()
        if key == "markdown":
            return cls.MARKDOWN
        if key == "yml":
            return cls.YAML
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"invalid format {value!r}: must be md, json or yaml") from None


# ── markdown ─────────────────────────────────────────────────────────────────


def write_tasks(out: TextIO, tasks: list[Task]) -> None:
    out.write("# Tasks\n\n")
    if not tasks:
        out.write("_No tasks._\n")
        return
    for t in tasks:
        checkbox = "[x]" if t.status is Status.DONE else "[ ]"
        meta = [t.priority.label, t.status.label]
        if t.due_date:
            meta.append(f"due {t.due_date.isoformat()}")
        if t.tags:
            meta.append("tags: " + ", ".join(t.tags))
        if t.time_logs:
            meta.append(f"logged {format_duration(t.total_logged)}")
        out.write(f"- {checkbox} **{t.title}** ({' | '.join(meta)})\n")
        if t.description:
            out.write(f"  > {t.description}\n")
        for st in t.subtasks:
            out.write(f"  - {'[x]' if st.completed else '[ ]'} {st.title}\n")


def write_notes(out: TextIO, notes: list[Note]) -> None:
    out.write("# Journal\n\n")
    if not notes:
        out.write("_No journal entries._\n")
        return
    for i, n in enumerate(notes):
        out.write(f"## {n.date.isoformat()}\n\n")
        if not n.entries:
            out.write("_No entries._\n")
        for e in n.entries:
            out.write(f"- **{e.created_at.strftime('%H:%M')}** {e.body}\n")
        if i < len(notes) - 1:
            out.write("\n")


# ── structured ───────────────────────────────────────────────────────────────


def _note_dict(n: Note) -> dict[str, Any]:
    return {
        "date": n.date.isoformat(),
        "entries": [
            {"body": e.body, "created_at": e.created_at.isoformat(timespec="seconds")}
            for e in n.entries
        ],
    }


def export_payload(tasks: list[Task], notes: list[Note] | None = None) -> dict[str, Any]:
    """Shared structure for JSON and YAML: {tasks: [...], journal: [...]}; journal only when given."""
    payload: dict[str, Any] = {"tasks": [task_to_dict(t) for t in tasks]}
    if notes is not None:
        payload["journal"] = [_note_dict(n) for n in notes]
    return payload


def write_json(out: TextIO, tasks: list[Task], notes: list[Note] | None = None) -> None:
    json.dump(export_payload(tasks, notes), out, indent=2, ensure_ascii=False)
    out.write("\n")


def write_yaml(out: TextIO, tasks: list[Task], notes: list[Note] | None = None) -> None:
    yaml.safe_dump(
        export_payload(tasks, notes),
        out,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )


def write_export(
    out: TextIO, fmt: Format, tasks: list[Task], notes: list[Note] | None = None
) -> None:
    if fmt is Format.MARKDOWN:
        write_tasks(out, tasks)
        if notes is not None:
            out.write("\n---\n\n")
            write_notes(out, notes)
    elif fmt is Format.JSON:
        write_json(out, tasks, notes)
    else:
        write_yaml(out, tasks, notes)


def export_path(fmt: Format, day: date | None = None, export_dir: Path | None = None) -> Path:
    export_dir = export_dir if export_dir else config.EXPORT_DIR
    return export_dir / f"export-{(day or clock.today()).isoformat()}.{fmt.value}"


def export_to_file(
    fmt: Format,
    tasks: list[Task],
    notes: list[Note] | None = None,
    export_dir: Path | None = None,
) -> Path:
    """Write a dated export file, overwriting today's file of the same format."""
    path = export_path(fmt, export_dir=export_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        write_export(f, fmt, tasks, notes)
    return path


# ── cli ──────────────────────────────────────────────────────────────────────


@cli(
    "rondo",
    name="export",
    flags={"fmt": ["-f", "--format"], "journal": ["-j", "--journal"], "output": ["-o", "--output"]},
)
def export_cmd(fmt: str = "md", journal: bool = False, output: str | None = None):
    """Export tasks (and optionally the journal) as md, json or yaml"""
    try:
        chosen = Format.parse(fmt)
    except ValueError as e:
        raise UsageError(str(e)) from e
    tasks = TaskStore().list_tasks()
    notes = JournalStore().list_notes() if journal else None
    if output is None:
        write_export(sys.stdout, chosen, tasks, notes)
        return
    path = Path(output)
    with path.open("w", encoding="utf-8") as f:
        write_export(f, chosen, tasks, notes)
    sys.stderr.write(f"Exported to {path}\n")
