"""Render-ready view of controller state. Renderers read these, never the Model."""

import dataclasses
from enum import Enum, IntEnum
from typing import Any

from rondo.core.models import Note, Task
from rondo.lib.dates import DueLevel


class Tab(IntEnum):
    ALL = 0
    ACTIVE = 1
    DONE = 2
    JOURNAL = 3

    @property
    def label(self) -> str:
        return self.name.title()


class Panel(Enum):
    LIST = "list"
    DETAIL = "detail"


class SortOrder(Enum):
    CREATED = "created"
    DUE = "due"
    PRIORITY = "priority"


@dataclasses.dataclass(frozen=True)
class TaskRow:
    task: Task
    blocked: bool
    due: DueLevel
    selected: bool


@dataclasses.dataclass(frozen=True)
class FieldView:
    title: str
    value: str
    placeholder: str
    error: str | None
    focused: bool


@dataclasses.dataclass(frozen=True)
class FormView:
    title: str
    fields: list[FieldView]
    cursor_visible: bool
    width: int


@dataclasses.dataclass(frozen=True)
class BlockerChoice:
    task: Task
    checked: bool
    highlighted: bool


@dataclasses.dataclass(frozen=True)
class Snapshot:
    mode: str
    tab: Tab
    panel: Panel
    width: int
    height: int
    panel_ratio: float
    status: str
    rows: list[TaskRow]
    selected: Task | None
    selected_blocked: bool
    subtask_idx: int
    notes: list[Note]
    selected_note: Note | None
    note_title: str
    entry_idx: int
    sort_by: SortOrder
    search: str
    tag_bar: bool
    active_tag: str
    tags: list[str]
    focus_timer: str
    undo: str | None
    form: FormView | None = None
    stats: dict[str, Any] | None = None
    blockers: list[BlockerChoice] = dataclasses.field(default_factory=list)
    help: list[tuple[str, str]] = dataclasses.field(default_factory=list)
