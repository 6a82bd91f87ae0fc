import dataclasses
import json
import logging
import sqlite3
from collections import defaultdict
from collections.abc import Iterable
from datetime import timedelta
from pathlib import Path
from typing import Any

from fncli import UsageError, cli

from . import db
from .core.errors import CycleError, NotFoundError, ValidationError
from .core.models import Priority, RecurFreq, Status, StatusChange, Subtask, Task, TimeLog
from .lib import clock
from .lib.converters import row_to_subtask, row_to_task, row_to_time_log
from .lib.dates import parse_due_date
from .lib.deps import has_cycle
from .lib.durations import format_duration
from .lib.recur import next_due_date

__all__ = [
    "TaskStore",
    "add_task",
    "format_task",
    "list_tasks",
    "normalize_tags",
    "render_tasks",
    "task_to_dict",
]

logger = logging.getLogger(__name__)

_TASK_COLS = "id, title, description, status, priority, due_date, recur_freq, recur_interval, created_at, updated_at"
_SUBTASK_COLS = "id, task_id, title, completed, position"
_TIME_LOG_COLS = "id, task_id, duration, note, logged_at"


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        name = tag.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def _placeholders(ids: list[int]) -> str:
    return ",".join("?" * len(ids))


class TaskStore:
    """Persistent task graph. Every public method is a single transaction."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    # ── reads ────────────────────────────────────────────────────────────────

    def list_tasks(self) -> list[Task]:
        with db.get_db(self.db_path) as conn:
            return self._fetch(conn, "1=1 ORDER BY created_at DESC, id DESC")

    def get(self, task_id: int) -> Task:
        with db.get_db(self.db_path) as conn:
            return self._get(conn, task_id)

    def list_time_logs(self, task_id: int) -> list[TimeLog]:
        with db.get_db(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_TIME_LOG_COLS} FROM time_logs WHERE task_id = ? ORDER BY logged_at DESC, id DESC",  # noqa: S608
                (task_id,),
            ).fetchall()
        return [row_to_time_log(r) for r in rows]

    def list_blocker_ids(self, task_id: int) -> list[int]:
        with db.get_db(self.db_path) as conn:
            return self._blocker_ids(conn, task_id)

    # ── task mutations ───────────────────────────────────────────────────────

    def create(self, task: Task) -> Task:
        now = clock.now()
        task = dataclasses.replace(
            task,
            tags=normalize_tags(task.tags),
            recur_interval=max(task.recur_interval, 1),
            created_at=now,
            updated_at=now,
        )
        with db.get_db(self.db_path) as conn:
            task_id = self._insert(conn, task)
            self._replace_tags(conn, task_id, task.tags)
        logger.debug("created task %d %r", task_id, task.title)
        return dataclasses.replace(task, id=task_id)

    def update(self, task: Task) -> Task:
        """Write the core fields and tags. Recurrence goes through update_recurrence."""
        task = dataclasses.replace(task, tags=normalize_tags(task.tags), updated_at=clock.now())
        with db.get_db(self.db_path) as conn:
            self._write(conn, task)
            self._replace_tags(conn, task.id, task.tags)
        return task

    def delete(self, task_id: int) -> None:
        with db.get_db(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"task {task_id} not found")
        logger.debug("deleted task %d", task_id)

    def restore(self, snapshot: Task) -> Task:
        """Re-insert a deleted task under a new id with its relations and timestamps."""
        with db.get_db(self.db_path) as conn:
            task_id = self._insert(conn, snapshot)
            self._replace_tags(conn, task_id, normalize_tags(snapshot.tags))
            conn.executemany(
                "INSERT INTO subtasks (task_id, title, completed, position) VALUES (?, ?, ?, ?)",
                [(task_id, s.title, s.completed, s.position) for s in snapshot.subtasks],
            )
            conn.executemany(
                "INSERT INTO time_logs (task_id, duration, note, logged_at) VALUES (?, ?, ?, ?)",
                [
                    (task_id, int(t.duration.total_seconds()), t.note, t.logged_at.isoformat())
                    for t in snapshot.time_logs
                ],
            )
            for blocker_id in snapshot.blocked_by:
                conn.execute(
                    "INSERT OR IGNORE INTO task_dependencies (task_id, blocked_by) "
                    "SELECT ?, id FROM tasks WHERE id = ?",
                    (task_id, blocker_id),
                )
            restored = self._get(conn, task_id)
        logger.debug("restored task %d as %d", snapshot.id, task_id)
        return restored

    def cycle_status(self, task_id: int) -> StatusChange:
        """Advance status; completing a recurring task spawns its next occurrence."""
        with db.get_db(self.db_path) as conn:
            task = self._get(conn, task_id)
            return self._transition(conn, task, task.status.next())

    def complete(self, task_id: int) -> StatusChange:
        with db.get_db(self.db_path) as conn:
            task = self._get(conn, task_id)
            if task.status is Status.DONE:
                return StatusChange(task=task, previous=task.status)
            return self._transition(conn, task, Status.DONE)

    def _transition(self, conn: sqlite3.Connection, task: Task, new_status: Status) -> StatusChange:
        spawned = None
        if new_status is Status.DONE and task.recurring:
            now = clock.now()
            occurrence = Task(
                id=0,
                title=task.title,
                description=task.description,
                priority=task.priority,
                due_date=next_due_date(task),
                recur_freq=task.recur_freq,
                recur_interval=task.recur_interval,
                tags=list(task.tags),
                created_at=now,
                updated_at=now,
            )
            new_id = self._insert(conn, occurrence)
            self._replace_tags(conn, new_id, occurrence.tags)
            spawned = dataclasses.replace(occurrence, id=new_id)
        updated = dataclasses.replace(task, status=new_status, updated_at=clock.now())
        self._write(conn, updated)
        return StatusChange(task=updated, previous=task.status, spawned=spawned)

    def update_recurrence(self, task_id: int, freq: RecurFreq, interval: int) -> None:
        with db.get_db(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE tasks SET recur_freq = ?, recur_interval = ?, updated_at = ? WHERE id = ?",
                (int(freq), max(interval, 1), clock.now().isoformat(), task_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"task {task_id} not found")

    # ── subtasks ─────────────────────────────────────────────────────────────

    def add_subtask(self, task_id: int, title: str) -> Subtask:
        with db.get_db(self.db_path) as conn:
            self._touch(conn, task_id)
            position = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM subtasks WHERE task_id = ?",
                (task_id,),
            ).fetchone()[0]
            cursor = conn.execute(
                "INSERT INTO subtasks (task_id, title, completed, position) VALUES (?, ?, 0, ?)",
                (task_id, title, position),
            )
        return Subtask(id=cursor.lastrowid or 0, task_id=task_id, title=title, position=position)

    def update_subtask(self, subtask_id: int, title: str) -> None:
        with db.get_db(self.db_path) as conn:
            sub = self._get_subtask(conn, subtask_id)
            conn.execute("UPDATE subtasks SET title = ? WHERE id = ?", (title, subtask_id))
            self._touch(conn, sub.task_id)

    def toggle_subtask(self, subtask_id: int) -> Subtask:
        with db.get_db(self.db_path) as conn:
            sub = self._get_subtask(conn, subtask_id)
            conn.execute(
                "UPDATE subtasks SET completed = ? WHERE id = ?", (not sub.completed, subtask_id)
            )
            self._touch(conn, sub.task_id)
        return dataclasses.replace(sub, completed=not sub.completed)

    def delete_subtask(self, subtask_id: int) -> None:
        with db.get_db(self.db_path) as conn:
            sub = self._get_subtask(conn, subtask_id)
            conn.execute("DELETE FROM subtasks WHERE id = ?", (subtask_id,))
            self._touch(conn, sub.task_id)

    def restore_subtask(self, task_id: int, title: str, completed: bool, position: int) -> Subtask:
        with db.get_db(self.db_path) as conn:
            self._touch(conn, task_id)
            cursor = conn.execute(
                "INSERT INTO subtasks (task_id, title, completed, position) VALUES (?, ?, ?, ?)",
                (task_id, title, completed, position),
            )
        return Subtask(
            id=cursor.lastrowid or 0,
            task_id=task_id,
            title=title,
            completed=completed,
            position=position,
        )

    # ── time logs ────────────────────────────────────────────────────────────

    def add_time_log(self, task_id: int, duration: timedelta, note: str = "") -> TimeLog:
        if duration < timedelta():
            raise ValidationError("duration must not be negative")
        logged_at = clock.now()
        with db.get_db(self.db_path) as conn:
            self._touch(conn, task_id)
            cursor = conn.execute(
                "INSERT INTO time_logs (task_id, duration, note, logged_at) VALUES (?, ?, ?, ?)",
                (task_id, int(duration.total_seconds()), note, logged_at.isoformat()),
            )
        return TimeLog(
            id=cursor.lastrowid or 0,
            task_id=task_id,
            duration=timedelta(seconds=int(duration.total_seconds())),
            note=note,
            logged_at=logged_at,
        )

    # ── dependencies ─────────────────────────────────────────────────────────

    def set_blocker(self, task_id: int, blocker_id: int) -> None:
        """Record that task_id is blocked by blocker_id. Cycles are rejected before any write."""
        with db.get_db(self.db_path) as conn:
            self._get_row(conn, task_id)
            self._get_row(conn, blocker_id)
            if has_cycle(task_id, [blocker_id], lambda tid: self._blocker_ids(conn, tid)):
                raise CycleError(task_id, blocker_id)
            conn.execute(
                "INSERT OR IGNORE INTO task_dependencies (task_id, blocked_by) VALUES (?, ?)",
                (task_id, blocker_id),
            )

    def remove_blocker(self, task_id: int, blocker_id: int) -> None:
        with db.get_db(self.db_path) as conn:
            conn.execute(
                "DELETE FROM task_dependencies WHERE task_id = ? AND blocked_by = ?",
                (task_id, blocker_id),
            )

    # ── internals ────────────────────────────────────────────────────────────

    def _fetch(self, conn: sqlite3.Connection, where: str, params: tuple = ()) -> list[Task]:
        rows = conn.execute(f"SELECT {_TASK_COLS} FROM tasks WHERE {where}", params).fetchall()  # noqa: S608
        tasks = [row_to_task(r) for r in rows]
        return self._hydrate(conn, tasks)

    def _hydrate(self, conn: sqlite3.Connection, tasks: list[Task]) -> list[Task]:
        if not tasks:
            return []
        ids = [t.id for t in tasks]
        marks = _placeholders(ids)

        subtasks: dict[int, list[Subtask]] = defaultdict(list)
        for row in conn.execute(
            f"SELECT {_SUBTASK_COLS} FROM subtasks WHERE task_id IN ({marks}) ORDER BY position, id",  # noqa: S608
            ids,
        ):
            sub = row_to_subtask(row)
            subtasks[sub.task_id].append(sub)

        tags: dict[int, list[str]] = defaultdict(list)
        for task_id, name in conn.execute(
            f"SELECT task_id, name FROM tags WHERE task_id IN ({marks}) ORDER BY id",  # noqa: S608
            ids,
        ):
            tags[task_id].append(name)

        logs: dict[int, list[TimeLog]] = defaultdict(list)
        for row in conn.execute(
            f"SELECT {_TIME_LOG_COLS} FROM time_logs WHERE task_id IN ({marks}) ORDER BY logged_at DESC, id DESC",  # noqa: S608
            ids,
        ):
            log = row_to_time_log(row)
            logs[log.task_id].append(log)

        blockers: dict[int, list[int]] = defaultdict(list)
        for task_id, blocker_id in conn.execute(
            f"SELECT task_id, blocked_by FROM task_dependencies WHERE task_id IN ({marks}) ORDER BY blocked_by",  # noqa: S608
            ids,
        ):
            blockers[task_id].append(blocker_id)

        return [
            dataclasses.replace(
                t,
                subtasks=subtasks[t.id],
                tags=tags[t.id],
                time_logs=logs[t.id],
                blocked_by=blockers[t.id],
            )
            for t in tasks
        ]

    def _get(self, conn: sqlite3.Connection, task_id: int) -> Task:
        tasks = self._fetch(conn, "id = ?", (task_id,))
        if not tasks:
            raise NotFoundError(f"task {task_id} not found")
        return tasks[0]

    def _get_row(self, conn: sqlite3.Connection, task_id: int) -> None:
        if conn.execute("SELECT 1 FROM tasks WHERE id = ?", (task_id,)).fetchone() is None:
            raise NotFoundError(f"task {task_id} not found")

    def _get_subtask(self, conn: sqlite3.Connection, subtask_id: int) -> Subtask:
        row = conn.execute(
            f"SELECT {_SUBTASK_COLS} FROM subtasks WHERE id = ?",  # noqa: S608
            (subtask_id,),
        ).fetchone()
        if row is None:
            raise NotFoundError(f"subtask {subtask_id} not found")
        return row_to_subtask(row)

    def _blocker_ids(self, conn: sqlite3.Connection, task_id: int) -> list[int]:
        return [
            row[0]
            for row in conn.execute(
                "SELECT blocked_by FROM task_dependencies WHERE task_id = ? ORDER BY blocked_by",
                (task_id,),
            )
        ]

    def _touch(self, conn: sqlite3.Connection, task_id: int) -> None:
        cursor = conn.execute(
            "UPDATE tasks SET updated_at = ? WHERE id = ?", (clock.now().isoformat(), task_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"task {task_id} not found")

    def _insert(self, conn: sqlite3.Connection, task: Task) -> int:
        cursor = conn.execute(
            "INSERT INTO tasks (title, description, status, priority, due_date, recur_freq, recur_interval, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                task.title,
                task.description,
                int(task.status),
                int(task.priority),
                task.due_date.isoformat() if task.due_date else None,
                int(task.recur_freq),
                max(task.recur_interval, 1),
                task.created_at.isoformat(),
                task.updated_at.isoformat(),
            ),
        )
        return cursor.lastrowid or 0

    def _write(self, conn: sqlite3.Connection, task: Task) -> None:
        cursor = conn.execute(
            "UPDATE tasks SET title = ?, description = ?, status = ?, priority = ?, due_date = ?, updated_at = ? WHERE id = ?",
            (
                task.title,
                task.description,
                int(task.status),
                int(task.priority),
                task.due_date.isoformat() if task.due_date else None,
                task.updated_at.isoformat(),
                task.id,
            ),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"task {task.id} not found")

    def _replace_tags(self, conn: sqlite3.Connection, task_id: int, tags: list[str]) -> None:
        conn.execute("DELETE FROM tags WHERE task_id = ?", (task_id,))
        conn.executemany(
            "INSERT INTO tags (task_id, name) VALUES (?, ?)", [(task_id, t) for t in tags]
        )


# ── cli ──────────────────────────────────────────────────────────────────────

_LIST_FILTERS = {
    "all": lambda t: True,
    "active": lambda t: t.status is not Status.DONE,
    "pending": lambda t: t.status is Status.PENDING,
    "done": lambda t: t.status is Status.DONE,
}


def task_to_dict(t: Task) -> dict[str, Any]:
    """Plain structure shared by `rondo ls -f json` and the JSON/YAML export."""
    d: dict[str, Any] = {
        "id": t.id,
        "title": t.title,
        "status": t.status.label,
        "priority": t.priority.label,
        "created_at": t.created_at.isoformat(timespec="seconds"),
    }
    if t.description:
        d["description"] = t.description
    if t.due_date:
        d["due_date"] = t.due_date.isoformat()
    if t.recurring:
        d["recur"] = {"freq": t.recur_freq.label, "interval": t.recur_interval}
    if t.tags:
        d["tags"] = list(t.tags)
    if t.subtasks:
        d["subtasks"] = [
            {"id": st.id, "title": st.title, "completed": st.completed} for st in t.subtasks
        ]
    if t.blocked_by:
        d["blocked_by"] = list(t.blocked_by)
    if t.time_logs:
        d["logged_seconds"] = int(t.total_logged.total_seconds())
    return d


def format_task(task: Task) -> str:
    parts = [f"{task.status.icon} #{task.id} {task.title}", f"[{task.priority.badge}]"]
    if task.due_date:
        parts.append(f"due {task.due_date.isoformat()}")
    if task.recurring:
        every = f"every {task.recur_interval} " if task.recur_interval > 1 else ""
        parts.append(f"({every}{task.recur_freq.label})")
    parts.extend(f"#{tag}" for tag in task.tags)
    if task.time_logs:
        parts.append(f"{format_duration(task.total_logged)} logged")
    return " ".join(parts)


def add_task(
    title: str,
    priority: str | None = None,
    due: str | None = None,
    tags: str | None = None,
    store: TaskStore | None = None,
) -> Task:
    title = title.strip()
    if not title:
        raise ValidationError("title cannot be empty")
    try:
        prio = Priority.parse(priority) if priority else Priority.MEDIUM
    except ValueError as e:
        raise ValidationError(str(e)) from e
    due_date = None
    if due:
        due_date = parse_due_date(due)
        if due_date is None:
            raise ValidationError(f"cannot parse due date: {due!r}")
    store = store or TaskStore()
    return store.create(
        Task(
            id=0,
            title=title,
            priority=prio,
            due_date=due_date,
            tags=(tags or "").split(","),
        )
    )


def list_tasks(status: str = "active", store: TaskStore | None = None) -> list[Task]:
    keep = _LIST_FILTERS.get(status)
    if keep is None:
        raise ValidationError(f"unknown status filter {status!r}: use all, active, pending or done")
    return [t for t in (store or TaskStore()).list_tasks() if keep(t)]


def render_tasks(tasks: list[Task], fmt: str = "text") -> str:
    if fmt == "json":
        return json.dumps([task_to_dict(t) for t in tasks], indent=2, ensure_ascii=False)
    if fmt != "text":
        raise ValidationError(f"unknown format {fmt!r}: use text or json")
    if not tasks:
        return "no tasks"
    return "\n".join(format_task(t) for t in tasks)


@cli(
    "rondo",
    name="add",
    flags={"title": [], "priority": ["-p", "--priority"], "due": ["-d", "--due"], "tags": ["-t", "--tags"]},
)
def add_cmd(
    title: list[str], priority: str | None = None, due: str | None = None, tags: str | None = None
):
    """Add a task"""
    if not title:
        raise UsageError("Usage: rondo add <title> [-p priority] [-d due] [-t tags]")
    task = add_task(" ".join(title), priority=priority, due=due, tags=tags)
    print(format_task(task))


@cli("rondo", name="done")
def done_cmd(task_id: int):
    """Mark a task done"""
    change = TaskStore().complete(task_id)
    print(format_task(change.task))
    if change.spawned:
        print(f"  next: {format_task(change.spawned)}")


@cli("rondo", name="ls", flags={"status": ["-s", "--status"], "fmt": ["-f", "--format"]})
def ls_cmd(status: str = "active", fmt: str = "text"):
    """List tasks (active, pending, done or all) as text or json"""
    print(render_tasks(list_tasks(status), fmt))
