"""Modal controller.

Messages enter through Model.update and are routed in a fixed order: a
non-Normal mode owns every key exclusively, then global keys, then the
(panel, key) table of the active tab family. Store calls are synchronous and
each one is its own transaction; the in-memory cache is reloaded after every
mutation.
"""

import dataclasses
import logging
import sqlite3
from collections import Counter
from collections.abc import Callable
from datetime import date, timedelta
from pathlib import Path

import yaml

from rondo import config
from rondo.core.errors import CycleError, NotFoundError, RondoError
from rondo.core.models import Note, Priority, RecurFreq, Session, Status, Subtask, Task
from rondo.export import Format, export_to_file
from rondo.focus import FocusStore
from rondo.journal import JournalStore
from rondo.lib import clock
from rondo.lib.dates import due_level, format_timer, note_title, parse_due_date
from rondo.lib.deps import is_blocked
from rondo.lib.durations import parse_duration
from rondo.tasks import TaskStore

from . import journal_tab, keys
from .forms import FormState, export_form, parse_tags, subtask_form, task_form, time_log_form
from .guard import guarded
from .messages import (
    BACKGROUND_MSGS,
    ClearStatusMsg,
    Cmd,
    Defer,
    ExportDone,
    FocusTickMsg,
    KeyMsg,
    Msg,
    NotesLoaded,
    Quit,
    ResizeMsg,
    TasksLoaded,
    Tick,
)
from .modes import (
    FORM_MODES,
    NORMAL,
    AddSubtask,
    AddTask,
    BlockerPicker,
    ConfirmDeleteSubtask,
    ConfirmDeleteTask,
    EditSubtask,
    EditTask,
    Export,
    FocusConfirmCancel,
    FormMode,
    Help,
    JournalAdd,
    JournalConfirmDelete,
    JournalConfirmHide,
    JournalEdit,
    Mode,
    Search,
    Stats,
    TagFilter,
    TimeLog,
)
from .snapshot import (
    BlockerChoice,
    FieldView,
    FormView,
    Panel,
    Snapshot,
    SortOrder,
    TaskRow,
    Tab,
)
from .undo import StatusRevert, SubtaskRestore, TaskRestore, UndoAction

__all__ = ["Model", "create_model"]

logger = logging.getLogger(__name__)

STATUS_TTL = 3.0
ERROR_TTL = 5.0
FOCUS_TICK = 1.0
STATS_DAYS = 30

Handler = Callable[["Model"], list[Cmd]]


class Model:
    def __init__(
        self,
        tasks: TaskStore,
        journal: JournalStore,
        focus: FocusStore,
        cfg: config.Config | None = None,
        config_path: Path | None = None,
    ):
        self.store = tasks
        self.journal = journal
        self.focus_store = focus
        self.cfg = cfg or config.Config()
        self.config_path = config_path

        self.tasks: list[Task] = []
        self.notes: list[Note] = []
        self.mode: Mode = NORMAL
        self.tab = Tab.ACTIVE
        self.panel = Panel.LIST
        self.cursor = 0
        self.subtask_idx = 0
        self.note_idx = 0
        self.entry_idx = 0
        self.sort_by = SortOrder.CREATED
        self.search = ""
        self.active_tag = ""
        self.tag_bar = False
        self.show_hidden = False
        self.session: Session | None = None
        self.undo_action: UndoAction | None = None
        self.status = ""
        self.width = 0
        self.height = 0

    # ── runtime boundary ─────────────────────────────────────────────────────

    def init(self) -> list[Cmd]:
        return [Defer(self._load_tasks), Defer(self._load_notes)]

    def update(self, msg: Msg) -> list[Cmd]:
        if isinstance(msg, ResizeMsg):
            self.width, self.height = msg.width, msg.height
        if isinstance(self.mode, FORM_MODES):
            cmds = self._update_form(self.mode, msg)
            if isinstance(msg, BACKGROUND_MSGS):
                cmds += self._update_background(msg)
            return cmds
        if isinstance(msg, KeyMsg):
            return self._update_key(msg.key)
        return self._update_background(msg)

    def set_status(self, text: str) -> list[Cmd]:
        self.status = text
        return [Tick(STATUS_TTL, ClearStatusMsg())]

    def set_error(self, err: Exception) -> list[Cmd]:
        self.status = f"Error: {err}"
        return [Tick(ERROR_TTL, ClearStatusMsg())]

    def _load_tasks(self) -> TasksLoaded:
        try:
            return TasksLoaded(self.store.list_tasks())
        except (RondoError, sqlite3.Error) as e:
            return TasksLoaded(error=e)

    def _load_notes(self) -> NotesLoaded:
        try:
            return NotesLoaded(self.journal.list_notes(include_hidden=self.show_hidden))
        except (RondoError, sqlite3.Error) as e:
            return NotesLoaded(error=e)

    def _update_background(self, msg: Msg) -> list[Cmd]:
        if isinstance(msg, ClearStatusMsg):
            self.status = ""
        elif isinstance(msg, FocusTickMsg):
            return self._focus_tick(msg)
        elif isinstance(msg, TasksLoaded):
            if msg.error is not None:
                logger.warning("loading tasks failed: %s", msg.error)
                return self.set_error(msg.error)
            self.tasks = msg.tasks
            self._clamp()
        elif isinstance(msg, NotesLoaded):
            if msg.error is not None:
                logger.warning("loading journal failed: %s", msg.error)
                return self.set_error(msg.error)
            self.notes = msg.notes
            journal_tab.clamp(self)
        elif isinstance(msg, ExportDone):
            if msg.error is not None:
                logger.warning("export failed: %s", msg.error)
                return self.set_error(msg.error)
            return self.set_status(f"Exported to {msg.path}")
        return []

    def _update_key(self, key: str) -> list[Cmd]:
        mode_handler = _MODE_HANDLERS.get(type(self.mode))
        if mode_handler is not None:
            return mode_handler(self, self.mode, key)
        global_handler = _GLOBAL_KEYS.get(key)
        if global_handler is not None:
            return global_handler(self)
        table = _JOURNAL_KEYS if self.tab is Tab.JOURNAL else _TASK_KEYS
        handler = table.get((self.panel, key)) or table.get((None, key))
        return handler(self) if handler else []

    def _update_form(self, mode: FormMode, msg: Msg) -> list[Cmd]:
        if isinstance(msg, KeyMsg) and msg.key == "esc":
            self.mode = NORMAL
            return []
        cmds = mode.form.update(msg)
        if mode.form.state is FormState.COMPLETED:
            self.mode = NORMAL
            return _FORM_SUBMITTERS[type(mode)](self, mode)
        if mode.form.state is FormState.ABORTED:
            self.mode = NORMAL
            return []
        return cmds

    # ── cache & selection ────────────────────────────────────────────────────

    def visible_tasks(self) -> list[Task]:
        result = self.tasks
        if self.tab is Tab.ACTIVE:
            result = [t for t in result if t.status is not Status.DONE]
        elif self.tab is Tab.DONE:
            result = [t for t in result if t.status is Status.DONE]
        if self.active_tag:
            result = [t for t in result if self.active_tag in t.tags]
        if self.search:
            q = self.search.lower()
            result = [
                t for t in result if q in t.title.lower() or any(q in tag.lower() for tag in t.tags)
            ]
        result = sorted(result, key=lambda t: (t.created_at, t.id), reverse=True)
        if self.sort_by is SortOrder.DUE:
            result.sort(key=lambda t: (t.due_date is None, t.due_date or date.max))
        elif self.sort_by is SortOrder.PRIORITY:
            result.sort(key=lambda t: t.priority, reverse=True)
        return result

    def selected_task(self) -> Task | None:
        visible = self.visible_tasks()
        if 0 <= self.cursor < len(visible):
            return visible[self.cursor]
        return None

    def selected_subtask(self) -> Subtask | None:
        task = self.selected_task()
        if task and 0 <= self.subtask_idx < len(task.subtasks):
            return task.subtasks[self.subtask_idx]
        return None

    def all_tags(self) -> list[str]:
        return sorted({tag for t in self.tasks for tag in t.tags})

    def _task(self, task_id: int) -> Task:
        for t in self.tasks:
            if t.id == task_id:
                return t
        raise NotFoundError(f"task {task_id} not found")

    def _status_of(self, task_id: int) -> Status:
        for t in self.tasks:
            if t.id == task_id:
                return t.status
        # A dangling edge cannot hold anything up.
        return Status.DONE

    def _select(self, task_id: int) -> None:
        for i, t in enumerate(self.visible_tasks()):
            if t.id == task_id:
                self.cursor = i
                return

    def _clamp(self) -> None:
        count = len(self.visible_tasks())
        self.cursor = min(max(self.cursor, 0), max(count - 1, 0))
        task = self.selected_task()
        subs = len(task.subtasks) if task else 0
        self.subtask_idx = min(max(self.subtask_idx, 0), max(subs - 1, 0))

    def _reload(self, select_id: int | None = None) -> None:
        current = self.selected_task()
        self.tasks = self.store.list_tasks()
        target = select_id if select_id is not None else (current.id if current else None)
        if target is not None:
            self._select(target)
        self._clamp()

    # ── global keys ──────────────────────────────────────────────────────────

    def _quit(self) -> list[Cmd]:
        return [Quit()]

    def _open_help(self) -> list[Cmd]:
        self.mode = Help()
        return []

    def _next_tab(self) -> list[Cmd]:
        self.tab = Tab((self.tab + 1) % len(Tab))
        self.panel = Panel.LIST
        self.subtask_idx = 0
        self.entry_idx = 0
        self._clamp()
        journal_tab.clamp(self)
        return []

    @guarded
    def _undo(self) -> list[Cmd]:
        action = self.undo_action
        if action is None:
            return self.set_status("Nothing to undo")
        self.undo_action = None
        action.apply(self.store)
        self._reload()
        return self.set_status(f"Undone: {action.description}")

    def _open_export(self) -> list[Cmd]:
        form = export_form()
        self.mode = Export(form)
        return form.init()

    @guarded
    def _toggle_focus(self) -> list[Cmd]:
        if self.session is not None:
            self.mode = FocusConfirmCancel()
            return []
        task = self.selected_task() if self.tab is not Tab.JOURNAL else None
        session = Session(id=0, started_at=clock.now(), task_id=task.id if task else None)
        self.session = self.focus_store.create(session)
        minutes = int(self.session.duration.total_seconds()) // 60
        return self.set_status(f"Focus session started ({minutes} min)") + [
            Tick(FOCUS_TICK, FocusTickMsg(self.session.id))
        ]

    def _focus_tick(self, msg: FocusTickMsg) -> list[Cmd]:
        session = self.session
        if session is None or session.id != msg.session_id:
            return []
        if session.remaining(clock.now()) > timedelta():
            return [Tick(FOCUS_TICK, msg)]
        self.session = None
        if isinstance(self.mode, FocusConfirmCancel):
            self.mode = NORMAL
        try:
            self.focus_store.complete(session.id)
        except (RondoError, sqlite3.Error) as e:
            logger.warning("completing focus session %d failed: %s", session.id, e)
            return self.set_error(e)
        return self.set_status("Focus session complete!")

    @guarded
    def _open_stats(self) -> list[Cmd]:
        self.mode = Stats(self._compute_stats())
        return []

    def _compute_stats(self) -> dict:
        statuses = Counter(t.status for t in self.tasks)
        priorities = Counter(t.priority for t in self.tasks)
        tags = Counter(tag for t in self.tasks for tag in t.tags)
        return {
            "total": len(self.tasks),
            "done": statuses[Status.DONE],
            "active": len(self.tasks) - statuses[Status.DONE],
            "in_progress": statuses[Status.IN_PROGRESS],
            "blocked": sum(1 for t in self.tasks if is_blocked(t.blocked_by, self._status_of)),
            "by_priority": {p.label: priorities[p] for p in Priority},
            "tags": dict(sorted(tags.items(), key=lambda kv: (-kv[1], kv[0]))),
            "focus_today": self.focus_store.today_count(),
            "focus_by_day": self.focus_store.completions_by_day(STATS_DAYS),
            "journal": {n.date.isoformat(): len(n.entries) for n in self.notes if n.entries},
        }

    def _resize_panel(self, step: float) -> list[Cmd]:
        ratio = config.clamp_ratio(self.cfg.panel_ratio + step)
        if ratio == self.cfg.panel_ratio:
            return []
        self.cfg.panel_ratio = ratio
        try:
            config.save(self.cfg, self.config_path)
        except OSError as e:
            logger.warning("saving config failed: %s", e)
            return self.set_error(e)
        return []

    def _toggle_tag_bar(self) -> list[Cmd]:
        if self.tab is Tab.JOURNAL:
            return []
        if self.tag_bar:
            self.tag_bar = False
            self.active_tag = ""
            self._clamp()
            return []
        self.tag_bar = True
        self.mode = TagFilter()
        return []

    # ── task tab keys ────────────────────────────────────────────────────────

    def _move(self, step: int) -> list[Cmd]:
        self.cursor += step
        self.subtask_idx = 0
        self._clamp()
        return []

    def _move_subtask(self, step: int) -> list[Cmd]:
        self.subtask_idx += step
        self._clamp()
        return []

    def _focus_panel(self, panel: Panel) -> list[Cmd]:
        self.panel = panel
        self._clamp()
        return []

    def _escape(self) -> list[Cmd]:
        if self.panel is Panel.DETAIL:
            self.panel = Panel.LIST
        elif self.search:
            self.search = ""
            self._clamp()
        return []

    def _sort(self, order: SortOrder) -> list[Cmd]:
        current = self.selected_task()
        self.sort_by = order
        if current:
            self._select(current.id)
        self._clamp()
        return []

    def _open_search(self) -> list[Cmd]:
        self.mode = Search(self.search)
        return []

    def _add_task(self) -> list[Cmd]:
        form = task_form()
        self.mode = AddTask(form)
        return form.init()

    def _edit_task(self) -> list[Cmd]:
        task = self.selected_task()
        if task is None:
            return []
        form = task_form(task)
        self.mode = EditTask(form, task.id)
        return form.init()

    def _confirm_delete_task(self) -> list[Cmd]:
        task = self.selected_task()
        if task is None:
            return []
        self.mode = ConfirmDeleteTask(task.id)
        return []

    @guarded
    def _cycle_status(self) -> list[Cmd]:
        task = self.selected_task()
        if task is None:
            return []
        change = self.store.cycle_status(task.id)
        self.undo_action = StatusRevert(task.id, change.previous, task.title)
        self._reload(select_id=task.id)
        text = f"Status: {change.task.status.label}"
        if change.spawned and change.spawned.due_date:
            text += f" (next due {change.spawned.due_date.isoformat()})"
        return self.set_status(text)

    def _add_subtask(self) -> list[Cmd]:
        task = self.selected_task()
        if task is None:
            return []
        form = subtask_form()
        self.mode = AddSubtask(form, task.id)
        return form.init()

    def _edit_subtask(self) -> list[Cmd]:
        task, sub = self.selected_task(), self.selected_subtask()
        if task is None or sub is None:
            return []
        form = subtask_form(sub.title)
        self.mode = EditSubtask(form, task.id, sub.id)
        return form.init()

    def _confirm_delete_subtask(self) -> list[Cmd]:
        task, sub = self.selected_task(), self.selected_subtask()
        if task is None or sub is None:
            return []
        self.mode = ConfirmDeleteSubtask(task.id, sub.id)
        return []

    @guarded
    def _toggle_subtask(self) -> list[Cmd]:
        sub = self.selected_subtask()
        if sub is None:
            return []
        toggled = self.store.toggle_subtask(sub.id)
        self._reload()
        return self.set_status("Subtask done" if toggled.completed else "Subtask reopened")

    def _log_time(self) -> list[Cmd]:
        task = self.selected_task()
        if task is None:
            return []
        form = time_log_form()
        self.mode = TimeLog(form, task.id)
        return form.init()

    def _open_blockers(self) -> list[Cmd]:
        task = self.selected_task()
        if task is None:
            return []
        candidates = tuple(t.id for t in self.tasks if t.id != task.id)
        if not candidates:
            return self.set_status("No other tasks to block on")
        self.mode = BlockerPicker(task.id, candidates)
        return []

    # ── mode handlers ────────────────────────────────────────────────────────

    def _on_help(self, mode: Help, key: str) -> list[Cmd]:
        if key in keys.HELP_CLOSE:
            self.mode = NORMAL
        return []

    def _on_stats(self, mode: Stats, key: str) -> list[Cmd]:
        if key in keys.STATS_CLOSE:
            self.mode = NORMAL
        return []

    def _on_search(self, mode: Search, key: str) -> list[Cmd]:
        if key == "esc":
            self.search = ""
            self.mode = NORMAL
        elif key == "enter":
            self.mode = NORMAL
        elif key == "backspace":
            self.mode = Search(mode.query[:-1])
            self.search = self.mode.query
        elif key == "space" or len(key) == 1:
            self.mode = Search(mode.query + (" " if key == "space" else key))
            self.search = self.mode.query
        self.cursor = 0
        self._clamp()
        return []

    def _on_tag_filter(self, mode: TagFilter, key: str) -> list[Cmd]:
        if key in keys.TAG_DONE:
            self.mode = NORMAL
            return []
        options = ["", *self.all_tags()]
        i = options.index(self.active_tag) if self.active_tag in options else 0
        if key in keys.TAG_NEXT:
            i += 1
        elif key in keys.TAG_PREV:
            i -= 1
        else:
            return []
        self.active_tag = options[i % len(options)]
        self.cursor = 0
        self._clamp()
        return []

    def _on_blocker_picker(self, mode: BlockerPicker, key: str) -> list[Cmd]:
        if key in keys.ESCAPE or key in keys.BLOCKERS or key == "q":
            self.mode = NORMAL
        elif key in keys.DOWN:
            self.mode = dataclasses.replace(mode, cursor=min(mode.cursor + 1, len(mode.candidates) - 1))
        elif key in keys.UP:
            self.mode = dataclasses.replace(mode, cursor=max(mode.cursor - 1, 0))
        elif key in keys.PICK_TOGGLE:
            return self._toggle_blocker(mode)
        return []

    @guarded
    def _toggle_blocker(self, mode: BlockerPicker) -> list[Cmd]:
        blocker_id = mode.candidates[mode.cursor]
        task = self._task(mode.task_id)
        if blocker_id in task.blocked_by:
            self.store.remove_blocker(task.id, blocker_id)
            text = "Blocker removed"
        else:
            try:
                self.store.set_blocker(task.id, blocker_id)
            except CycleError:
                return self.set_status("Cannot add blocker: it would create a cycle")
            text = "Blocker added"
        self._reload()
        return self.set_status(text)

    @guarded
    def _on_confirm_delete_task(self, mode: ConfirmDeleteTask, key: str) -> list[Cmd]:
        if key in keys.CONFIRM:
            self.mode = NORMAL
            task = self._task(mode.task_id)
            self.store.delete(task.id)
            self.undo_action = TaskRestore(task)
            self._reload()
            return self.set_status("Task deleted")
        if key in keys.CANCEL:
            self.mode = NORMAL
        return []

    @guarded
    def _on_confirm_delete_subtask(self, mode: ConfirmDeleteSubtask, key: str) -> list[Cmd]:
        if key in keys.CONFIRM:
            self.mode = NORMAL
            task = self._task(mode.task_id)
            sub = next((s for s in task.subtasks if s.id == mode.subtask_id), None)
            if sub is None:
                raise NotFoundError(f"subtask {mode.subtask_id} not found")
            self.store.delete_subtask(sub.id)
            self.undo_action = SubtaskRestore(task.id, sub.title, sub.completed, sub.position)
            self._reload()
            return self.set_status("Subtask deleted")
        if key in keys.CANCEL:
            self.mode = NORMAL
        return []

    def _on_focus_confirm_cancel(self, mode: FocusConfirmCancel, key: str) -> list[Cmd]:
        if self.session is None:
            self.mode = NORMAL
            return []
        if key in keys.CONFIRM:
            self.mode = NORMAL
            self.session = None
            return self.set_status("Focus session cancelled")
        if key in keys.CANCEL:
            self.mode = NORMAL
        return []

    # ── form submissions ─────────────────────────────────────────────────────

    @staticmethod
    def _recurrence(mode: AddTask | EditTask) -> tuple[RecurFreq, int]:
        freq = mode.form.get("recur_freq")
        interval = str(mode.form.get("recur_interval")).strip()
        return RecurFreq(freq), int(interval) if interval else 1

    @guarded
    def _submit_add_task(self, mode: AddTask) -> list[Cmd]:
        v = mode.form.values()
        freq, interval = self._recurrence(mode)
        task = self.store.create(
            Task(
                id=0,
                title=str(v["title"]).strip(),
                description=str(v["description"]).strip(),
                priority=Priority(v["priority"]),
                due_date=parse_due_date(str(v["due_date"])),
                tags=parse_tags(v["tags"]),
                recur_freq=freq,
                recur_interval=interval,
            )
        )
        self._reload(select_id=task.id)
        return self.set_status("Task created")

    @guarded
    def _submit_edit_task(self, mode: EditTask) -> list[Cmd]:
        v = mode.form.values()
        freq, interval = self._recurrence(mode)
        current = self.store.get(mode.task_id)
        self.store.update(
            dataclasses.replace(
                current,
                title=str(v["title"]).strip(),
                description=str(v["description"]).strip(),
                priority=Priority(v["priority"]),
                due_date=parse_due_date(str(v["due_date"])),
                tags=parse_tags(v["tags"]),
            )
        )
        self.store.update_recurrence(current.id, freq, interval)
        self._reload(select_id=current.id)
        return self.set_status("Task updated")

    @guarded
    def _submit_add_subtask(self, mode: AddSubtask) -> list[Cmd]:
        self.store.add_subtask(mode.task_id, str(mode.form.get("title")).strip())
        self._reload()
        return self.set_status("Subtask added")

    @guarded
    def _submit_edit_subtask(self, mode: EditSubtask) -> list[Cmd]:
        self.store.update_subtask(mode.subtask_id, str(mode.form.get("title")).strip())
        self._reload()
        return self.set_status("Subtask updated")

    @guarded
    def _submit_time_log(self, mode: TimeLog) -> list[Cmd]:
        duration = parse_duration(str(mode.form.get("duration")))
        self.store.add_time_log(mode.task_id, duration, str(mode.form.get("note")).strip())
        self._reload()
        return self.set_status("Time logged")

    def _submit_export(self, mode: Export) -> list[Cmd]:
        fmt = Format.parse(str(mode.form.get("format")))
        include_journal = bool(mode.form.get("include_journal"))
        return [Defer(lambda: self._run_export(fmt, include_journal))]

    def _run_export(self, fmt: Format, include_journal: bool) -> ExportDone:
        try:
            tasks = self.store.list_tasks()
            notes = self.journal.list_notes() if include_journal else None
            return ExportDone(path=export_to_file(fmt, tasks, notes))
        except (RondoError, sqlite3.Error, OSError, yaml.YAMLError) as e:
            return ExportDone(error=e)

    # ── snapshot ─────────────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        now = clock.now()
        today = now.date()
        visible = self.visible_tasks()
        selected = self.selected_task()
        rows = [
            TaskRow(
                task=t,
                blocked=is_blocked(t.blocked_by, self._status_of),
                due=due_level(t.due_date, today) if t.status is not Status.DONE else due_level(None),
                selected=selected is not None and t.id == selected.id,
            )
            for t in visible
        ]
        note = journal_tab.selected_note(self)
        mode = self.mode

        form = None
        if isinstance(mode, FORM_MODES):
            f = mode.form
            form = FormView(
                title=f.title,
                fields=[
                    FieldView(fd.title, fd.display(), fd.placeholder, fd.error, i == f.focus)
                    for i, fd in enumerate(f.fields)
                ],
                cursor_visible=f.cursor_visible,
                width=f.width,
            )

        blockers = []
        if isinstance(mode, BlockerPicker):
            target = next((t for t in self.tasks if t.id == mode.task_id), None)
            by_id = {t.id: t for t in self.tasks}
            blockers = [
                BlockerChoice(
                    task=by_id[cid],
                    checked=target is not None and cid in target.blocked_by,
                    highlighted=i == mode.cursor,
                )
                for i, cid in enumerate(mode.candidates)
                if cid in by_id
            ]

        return Snapshot(
            mode=mode.name,
            tab=self.tab,
            panel=self.panel,
            width=self.width,
            height=self.height,
            panel_ratio=self.cfg.panel_ratio,
            status=self.status,
            rows=rows,
            selected=selected,
            selected_blocked=bool(selected and is_blocked(selected.blocked_by, self._status_of)),
            subtask_idx=self.subtask_idx,
            notes=journal_tab.visible_notes(self),
            selected_note=note,
            note_title=note_title(note.date, today) if note else "",
            entry_idx=self.entry_idx,
            sort_by=self.sort_by,
            search=self.search,
            tag_bar=self.tag_bar,
            active_tag=self.active_tag,
            tags=self.all_tags(),
            focus_timer=format_timer(self.session.remaining(now)) if self.session else "",
            undo=self.undo_action.description if self.undo_action else None,
            form=form,
            stats=mode.data if isinstance(mode, Stats) else None,
            blockers=blockers,
            help=keys.HELP_LINES if isinstance(mode, Help) else [],
        )


def create_model(db_path: Path | None = None) -> Model:
    """Model wired to the stores and the saved config."""
    return Model(TaskStore(db_path), JournalStore(db_path), FocusStore(db_path), cfg=config.load())


# ── dispatch tables ──────────────────────────────────────────────────────────


def _bind(table: dict, panel: Panel | None, names: tuple[str, ...], fn: Handler) -> None:
    for name in names:
        table[(panel, name)] = fn


_GLOBAL_KEYS: dict[str, Handler] = {}
for _names, _fn in [
    (keys.QUIT, Model._quit),
    (keys.HELP, Model._open_help),
    (keys.TAB, Model._next_tab),
    (keys.UNDO, Model._undo),
    (keys.EXPORT, Model._open_export),
    (keys.FOCUS, Model._toggle_focus),
    (keys.STATS, Model._open_stats),
    (keys.WIDER, lambda m: m._resize_panel(keys.RESIZE_STEP)),
    (keys.NARROWER, lambda m: m._resize_panel(-keys.RESIZE_STEP)),
    (keys.TAG_BAR, Model._toggle_tag_bar),
]:
    for _name in _names:
        _GLOBAL_KEYS[_name] = _fn

_TASK_KEYS: dict[tuple[Panel | None, str], Handler] = {}
_bind(_TASK_KEYS, Panel.LIST, keys.ADD, Model._add_task)
_bind(_TASK_KEYS, Panel.LIST, keys.EDIT, Model._edit_task)
_bind(_TASK_KEYS, Panel.LIST, keys.DELETE, Model._confirm_delete_task)
_bind(_TASK_KEYS, Panel.LIST, keys.STATUS, Model._cycle_status)
_bind(_TASK_KEYS, Panel.LIST, keys.DOWN, lambda m: m._move(1))
_bind(_TASK_KEYS, Panel.LIST, keys.UP, lambda m: m._move(-1))
_bind(_TASK_KEYS, Panel.DETAIL, keys.ADD, Model._add_subtask)
_bind(_TASK_KEYS, Panel.DETAIL, keys.EDIT, Model._edit_subtask)
_bind(_TASK_KEYS, Panel.DETAIL, keys.DELETE, Model._confirm_delete_subtask)
_bind(_TASK_KEYS, Panel.DETAIL, keys.STATUS, Model._toggle_subtask)
_bind(_TASK_KEYS, Panel.DETAIL, keys.TIME_LOG, Model._log_time)
_bind(_TASK_KEYS, Panel.DETAIL, keys.BLOCKERS, Model._open_blockers)
_bind(_TASK_KEYS, Panel.DETAIL, keys.DOWN, lambda m: m._move_subtask(1))
_bind(_TASK_KEYS, Panel.DETAIL, keys.UP, lambda m: m._move_subtask(-1))
_bind(_TASK_KEYS, None, keys.SUBTASK, Model._add_subtask)
_bind(_TASK_KEYS, None, keys.SEARCH, Model._open_search)
_bind(_TASK_KEYS, None, keys.SORT_CREATED, lambda m: m._sort(SortOrder.CREATED))
_bind(_TASK_KEYS, None, keys.SORT_DUE, lambda m: m._sort(SortOrder.DUE))
_bind(_TASK_KEYS, None, keys.SORT_PRIORITY, lambda m: m._sort(SortOrder.PRIORITY))
_bind(_TASK_KEYS, None, keys.FOCUS_LIST, lambda m: m._focus_panel(Panel.LIST))
_bind(_TASK_KEYS, None, keys.FOCUS_DETAIL, lambda m: m._focus_panel(Panel.DETAIL))
_bind(_TASK_KEYS, None, keys.ESCAPE, Model._escape)

_JOURNAL_KEYS = journal_tab.bindings()

_MODE_HANDLERS: dict[type, Callable] = {
    Help: Model._on_help,
    Stats: Model._on_stats,
    Search: Model._on_search,
    TagFilter: Model._on_tag_filter,
    BlockerPicker: Model._on_blocker_picker,
    ConfirmDeleteTask: Model._on_confirm_delete_task,
    ConfirmDeleteSubtask: Model._on_confirm_delete_subtask,
    FocusConfirmCancel: Model._on_focus_confirm_cancel,
    JournalConfirmHide: journal_tab.on_confirm_hide,
    JournalConfirmDelete: journal_tab.on_confirm_delete,
}

_FORM_SUBMITTERS: dict[type, Callable] = {
    AddTask: Model._submit_add_task,
    EditTask: Model._submit_edit_task,
    AddSubtask: Model._submit_add_subtask,
    EditSubtask: Model._submit_edit_subtask,
    TimeLog: Model._submit_time_log,
    Export: Model._submit_export,
    JournalAdd: journal_tab.submit_add,
    JournalEdit: journal_tab.submit_edit,
}
