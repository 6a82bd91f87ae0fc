import dataclasses
import itertools
import re
from collections.abc import Callable
from enum import Enum

from rondo.core.models import Priority, RecurFreq, Task
from rondo.journal import MAX_ENTRY_LENGTH
from rondo.lib.dates import parse_due_date
from rondo.lib.durations import parse_duration

from .messages import BlinkMsg, Cmd, KeyMsg, Msg, ResizeMsg, Tick

__all__ = [
    "Field",
    "FieldKind",
    "Form",
    "FormState",
    "export_form",
    "journal_form",
    "subtask_form",
    "task_form",
    "time_log_form",
]

BLINK_INTERVAL = 0.5

_form_ids = itertools.count(1)

_NAMED_KEYS = {
    "enter",
    "tab",
    "shift+tab",
    "backspace",
    "delete",
    "esc",
    "up",
    "down",
    "left",
    "right",
    "home",
    "end",
    "pgup",
    "pgdown",
}
_PREV_OPTION = ("left", "h", "up", "k")
_NEXT_OPTION = ("right", "l", "down", "j")


class FormState(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABORTED = "aborted"


class FieldKind(Enum):
    INPUT = "input"
    TEXT = "text"
    SELECT = "select"
    CONFIRM = "confirm"


Validator = Callable[[object], None]


@dataclasses.dataclass
class Field:
    key: str
    title: str
    kind: FieldKind = FieldKind.INPUT
    value: object = ""
    options: list[tuple[str, object]] = dataclasses.field(default_factory=list)
    validate: Validator | None = None
    placeholder: str = ""
    char_limit: int = 0
    error: str | None = None

    def display(self) -> str:
        if self.kind is FieldKind.SELECT:
            for label, value in self.options:
                if value == self.value:
                    return label
            return ""
        if self.kind is FieldKind.CONFIRM:
            return "Yes" if self.value else "No"
        return str(self.value)

    def check(self) -> bool:
        self.error = None
        if self.validate is None:
            return True
        try:
            self.validate(self.value)
        except ValueError as e:
            self.error = str(e)
            return False
        return True

    def _insert(self, text: str) -> None:
        value = str(self.value) + text
        if self.char_limit:
            value = value[: self.char_limit]
        self.value = value

    def _cycle(self, step: int) -> None:
        values = [v for _, v in self.options]
        if not values:
            return
        i = values.index(self.value) if self.value in values else 0
        self.value = values[(i + step) % len(values)]


def _is_text(key: str) -> bool:
    if key == "space":
        return True
    if key in _NAMED_KEYS or key.startswith(("ctrl+", "alt+", "shift+")):
        return False
    return re.fullmatch(r"f\d{1,2}", key) is None


class Form:
    """A single group of fields driven by messages.

    Enter validates the focused field and advances; on the last field it
    validates everything and completes. ctrl+c aborts. Escape is left to the
    owner so it can cancel without validation.
    """

    def __init__(self, title: str, fields: list[Field]):
        self.id = next(_form_ids)
        self.title = title
        self.fields = fields
        self.focus = 0
        self.state = FormState.ACTIVE
        self.width = 0
        self.cursor_visible = True

    def init(self) -> list[Cmd]:
        return [Tick(BLINK_INTERVAL, BlinkMsg(self.id))]

    @property
    def focused(self) -> Field:
        return self.fields[self.focus]

    def get(self, key: str) -> object:
        for f in self.fields:
            if f.key == key:
                return f.value
        raise KeyError(key)

    def values(self) -> dict[str, object]:
        return {f.key: f.value for f in self.fields}

    def update(self, msg: Msg) -> list[Cmd]:
        if self.state is not FormState.ACTIVE:
            return []
        if isinstance(msg, ResizeMsg):
            self.width = msg.width
            return []
        if isinstance(msg, BlinkMsg):
            if msg.form_id != self.id:
                return []
            self.cursor_visible = not self.cursor_visible
            return [Tick(BLINK_INTERVAL, BlinkMsg(self.id))]
        if isinstance(msg, KeyMsg):
            self._key(msg.key)
        return []

    def _key(self, key: str) -> None:
        field = self.focused
        self.cursor_visible = True
        if key == "ctrl+c":
            self.state = FormState.ABORTED
        elif key == "enter":
            self._advance(submit=True)
        elif key == "tab":
            self._advance(submit=False)
        elif key == "shift+tab":
            self.focus = max(self.focus - 1, 0)
        elif field.kind is FieldKind.SELECT:
            if key in _PREV_OPTION:
                field._cycle(-1)
            elif key in _NEXT_OPTION:
                field._cycle(1)
        elif field.kind is FieldKind.CONFIRM:
            if key in ("y", "Y"):
                field.value = True
            elif key in ("n", "N"):
                field.value = False
            elif key in _PREV_OPTION + _NEXT_OPTION:
                field.value = not field.value
        elif key == "backspace":
            field.value = str(field.value)[:-1]
        elif key in ("alt+enter", "ctrl+j") and field.kind is FieldKind.TEXT:
            field._insert("\n")
        elif _is_text(key):
            field._insert(" " if key == "space" else key)

    def _advance(self, submit: bool) -> None:
        if not self.focused.check():
            return
        if self.focus < len(self.fields) - 1:
            self.focus += 1
            return
        if not submit:
            return
        for i, f in enumerate(self.fields):
            if not f.check():
                self.focus = i
                return
        self.state = FormState.COMPLETED


# ── validators ───────────────────────────────────────────────────────────────


def validate_not_blank(value: object) -> None:
    if not str(value).strip():
        raise ValueError("cannot be empty")


def validate_optional_date(value: object) -> None:
    s = str(value).strip()
    if s and parse_due_date(s) is None:
        raise ValueError("use YYYY-MM-DD, today, tomorrow or a weekday")


def validate_duration(value: object) -> None:
    parse_duration(str(value))


def validate_interval(value: object) -> None:
    s = str(value).strip()
    if s and (not s.isdigit() or int(s) < 1):
        raise ValueError("must be a positive whole number")


def parse_tags(value: object) -> list[str]:
    return [t.strip() for t in str(value).split(",") if t.strip()]


# ── builders ─────────────────────────────────────────────────────────────────

_PRIORITY_OPTIONS: list[tuple[str, object]] = [(p.label, p) for p in Priority]
_RECUR_OPTIONS: list[tuple[str, object]] = [(f.label.title(), f) for f in RecurFreq]


def task_form(task: Task | None = None) -> Form:
    """Add form when task is None, edit form prefilled from task otherwise."""
    t = task or Task(id=0, title="", priority=Priority.MEDIUM)
    fields = [
        Field("title", "Title", value=t.title, validate=validate_not_blank),
        Field("description", "Description", FieldKind.TEXT, value=t.description),
        Field("priority", "Priority", FieldKind.SELECT, value=t.priority, options=_PRIORITY_OPTIONS),
        Field(
            "due_date",
            "Due Date",
            value=t.due_date.isoformat() if t.due_date else "",
            placeholder="YYYY-MM-DD",
            validate=validate_optional_date,
        ),
        Field("tags", "Tags", value=", ".join(t.tags), placeholder="comma separated"),
        Field("recur_freq", "Recurrence", FieldKind.SELECT, value=t.recur_freq, options=_RECUR_OPTIONS),
        Field(
            "recur_interval",
            "Every",
            value=str(t.recur_interval) if t.recurring else "",
            placeholder="1",
            validate=validate_interval,
        ),
    ]
    return Form("Edit Task" if task else "New Task", fields)


def subtask_form(title: str = "") -> Form:
    return Form(
        "Edit Subtask" if title else "New Subtask",
        [Field("title", "Subtask", value=title, validate=validate_not_blank)],
    )


def journal_form(body: str = "") -> Form:
    return Form(
        "Edit Entry" if body else "Journal Entry",
        [
            Field(
                "body",
                "Journal Entry",
                FieldKind.TEXT,
                value=body,
                char_limit=MAX_ENTRY_LENGTH,
                validate=validate_not_blank,
            )
        ],
    )


def export_form() -> Form:
    return Form(
        "Export",
        [
            Field(
                "format",
                "Format",
                FieldKind.SELECT,
                value="md",
                options=[("Markdown", "md"), ("JSON", "json"), ("YAML", "yaml")],
            ),
            Field("include_journal", "Include Journal?", FieldKind.CONFIRM, value=False),
        ],
    )


def time_log_form() -> Form:
    return Form(
        "Log Time",
        [
            Field(
                "duration",
                "Duration",
                placeholder="e.g. 1h30m, 45m, 2h",
                validate=validate_duration,
            ),
            Field("note", "Note (optional)"),
        ],
    )
