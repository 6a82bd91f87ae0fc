"""Controller modes. Each variant carries exactly the data its dialog needs."""

import dataclasses
from typing import Any, ClassVar

from .forms import Form


@dataclasses.dataclass(frozen=True)
class Normal:
    name: ClassVar[str] = "normal"


@dataclasses.dataclass(frozen=True)
class Help:
    name: ClassVar[str] = "help"


@dataclasses.dataclass(frozen=True)
class Stats:
    name: ClassVar[str] = "stats"
    data: dict[str, Any] = dataclasses.field(default_factory=dict, hash=False)


@dataclasses.dataclass(frozen=True)
class Search:
    name: ClassVar[str] = "search"
    query: str = ""


@dataclasses.dataclass(frozen=True)
class TagFilter:
    name: ClassVar[str] = "tag_filter"


@dataclasses.dataclass(frozen=True)
class BlockerPicker:
    name: ClassVar[str] = "blocker_picker"
    task_id: int
    candidates: tuple[int, ...]
    cursor: int = 0


@dataclasses.dataclass(frozen=True)
class ConfirmDeleteTask:
    name: ClassVar[str] = "confirm_delete_task"
    task_id: int


@dataclasses.dataclass(frozen=True)
class ConfirmDeleteSubtask:
    name: ClassVar[str] = "confirm_delete_subtask"
    task_id: int
    subtask_id: int


@dataclasses.dataclass(frozen=True)
class FocusConfirmCancel:
    name: ClassVar[str] = "focus_confirm_cancel"


@dataclasses.dataclass(frozen=True)
class JournalConfirmHide:
    name: ClassVar[str] = "journal_confirm_hide"
    note_id: int
    hidden: bool


@dataclasses.dataclass(frozen=True)
class JournalConfirmDelete:
    name: ClassVar[str] = "journal_confirm_delete"
    entry_id: int


# ── form modes ───────────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class AddTask:
    name: ClassVar[str] = "add_task"
    form: Form


@dataclasses.dataclass(frozen=True)
class EditTask:
    name: ClassVar[str] = "edit_task"
    form: Form
    task_id: int


@dataclasses.dataclass(frozen=True)
class AddSubtask:
    name: ClassVar[str] = "add_subtask"
    form: Form
    task_id: int


@dataclasses.dataclass(frozen=True)
class EditSubtask:
    name: ClassVar[str] = "edit_subtask"
    form: Form
    task_id: int
    subtask_id: int


@dataclasses.dataclass(frozen=True)
class TimeLog:
    name: ClassVar[str] = "time_log"
    form: Form
    task_id: int


@dataclasses.dataclass(frozen=True)
class Export:
    name: ClassVar[str] = "export"
    form: Form


@dataclasses.dataclass(frozen=True)
class JournalAdd:
    name: ClassVar[str] = "journal_add"
    form: Form


@dataclasses.dataclass(frozen=True)
class JournalEdit:
    name: ClassVar[str] = "journal_edit"
    form: Form
    entry_id: int


FormMode = AddTask | EditTask | AddSubtask | EditSubtask | TimeLog | Export | JournalAdd | JournalEdit
FORM_MODES = (AddTask, EditTask, AddSubtask, EditSubtask, TimeLog, Export, JournalAdd, JournalEdit)

Mode = (
    Normal
    | Help
    | Stats
    | Search
    | TagFilter
    | BlockerPicker
    | ConfirmDeleteTask
    | ConfirmDeleteSubtask
    | FocusConfirmCancel
    | JournalConfirmHide
    | JournalConfirmDelete
    | FormMode
)

NORMAL = Normal()
