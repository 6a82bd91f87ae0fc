"""Journal tab handlers. Each takes the controller and returns commands."""

from typing import TYPE_CHECKING

from rondo.core.models import Entry, Note

from . import keys
from .forms import journal_form
from .guard import guarded
from .messages import Cmd
from .modes import NORMAL, JournalAdd, JournalConfirmDelete, JournalConfirmHide, JournalEdit
from .snapshot import Panel

if TYPE_CHECKING:
    from .model import Model


def visible_notes(m: "Model") -> list[Note]:
    if m.show_hidden:
        return m.notes
    return [n for n in m.notes if not n.hidden]


def selected_note(m: "Model") -> Note | None:
    notes = visible_notes(m)
    if 0 <= m.note_idx < len(notes):
        return notes[m.note_idx]
    return None


def selected_entry(m: "Model") -> Entry | None:
    note = selected_note(m)
    if note and 0 <= m.entry_idx < len(note.entries):
        return note.entries[m.entry_idx]
    return None


def clamp(m: "Model") -> None:
    notes = visible_notes(m)
    m.note_idx = min(max(m.note_idx, 0), max(len(notes) - 1, 0))
    note = selected_note(m)
    count = len(note.entries) if note else 0
    m.entry_idx = min(max(m.entry_idx, 0), max(count - 1, 0))


def reload(m: "Model", select_note_id: int | None = None) -> None:
    current = selected_note(m)
    m.notes = m.journal.list_notes(include_hidden=m.show_hidden)
    target = select_note_id if select_note_id is not None else (current.id if current else None)
    if target is not None:
        for i, n in enumerate(visible_notes(m)):
            if n.id == target:
                m.note_idx = i
                break
    clamp(m)


# ── normal-mode keys ─────────────────────────────────────────────────────────


def add_entry(m: "Model") -> list[Cmd]:
    form = journal_form()
    m.mode = JournalAdd(form)
    return form.init()


def move_note(m: "Model", step: int) -> list[Cmd]:
    m.note_idx += step
    m.entry_idx = 0
    clamp(m)
    return []


def move_entry(m: "Model", step: int) -> list[Cmd]:
    m.entry_idx += step
    clamp(m)
    return []


def confirm_hide(m: "Model") -> list[Cmd]:
    note = selected_note(m)
    if note is None:
        return []
    m.mode = JournalConfirmHide(note.id, note.hidden)
    return []


@guarded
def toggle_show_hidden(m: "Model") -> list[Cmd]:
    m.show_hidden = not m.show_hidden
    reload(m)
    return m.set_status("Showing hidden notes" if m.show_hidden else "Hidden notes concealed")


def edit_entry(m: "Model") -> list[Cmd]:
    entry = selected_entry(m)
    if entry is None:
        return []
    form = journal_form(entry.body)
    m.mode = JournalEdit(form, entry.id)
    return form.init()


def confirm_delete_entry(m: "Model") -> list[Cmd]:
    entry = selected_entry(m)
    if entry is None:
        return []
    m.mode = JournalConfirmDelete(entry.id)
    return []


def focus_panel(m: "Model", panel: Panel) -> list[Cmd]:
    m.panel = panel
    clamp(m)
    return []


def escape(m: "Model") -> list[Cmd]:
    m.panel = Panel.LIST
    return []


# ── dialogs ──────────────────────────────────────────────────────────────────


@guarded
def on_confirm_hide(m: "Model", mode: JournalConfirmHide, key: str) -> list[Cmd]:
    if key in keys.CONFIRM:
        m.mode = NORMAL
        hidden = m.journal.toggle_hidden(mode.note_id)
        reload(m)
        return m.set_status("Note hidden" if hidden else "Note restored")
    if key in keys.CANCEL:
        m.mode = NORMAL
    return []


@guarded
def on_confirm_delete(m: "Model", mode: JournalConfirmDelete, key: str) -> list[Cmd]:
    if key in keys.CONFIRM:
        m.mode = NORMAL
        m.journal.delete_entry(mode.entry_id)
        reload(m)
        return m.set_status("Entry deleted")
    if key in keys.CANCEL:
        m.mode = NORMAL
    return []


# ── form submissions ─────────────────────────────────────────────────────────


@guarded
def submit_add(m: "Model", mode: JournalAdd) -> list[Cmd]:
    note = m.journal.get_or_create_today()
    m.journal.add_entry(note.id, str(mode.form.get("body")))
    reload(m, select_note_id=note.id)
    return m.set_status("Entry added")


@guarded
def submit_edit(m: "Model", mode: JournalEdit) -> list[Cmd]:
    m.journal.update_entry(mode.entry_id, str(mode.form.get("body")))
    reload(m)
    return m.set_status("Entry updated")


def bindings() -> dict[tuple[Panel | None, str], object]:
    """(panel, key) -> handler for the journal tab; panel None applies to both."""
    table: dict[tuple[Panel | None, str], object] = {}

    def bind(panel: Panel | None, names: tuple[str, ...], fn) -> None:
        for name in names:
            table[(panel, name)] = fn

    bind(None, keys.ADD, add_entry)
    bind(None, keys.FOCUS_LIST, lambda m: focus_panel(m, Panel.LIST))
    bind(None, keys.FOCUS_DETAIL, lambda m: focus_panel(m, Panel.DETAIL))
    bind(None, keys.ESCAPE, escape)
    bind(Panel.LIST, keys.HIDE, confirm_hide)
    bind(Panel.LIST, keys.SHOW_HIDDEN, toggle_show_hidden)
    bind(Panel.LIST, keys.DOWN, lambda m: move_note(m, 1))
    bind(Panel.LIST, keys.UP, lambda m: move_note(m, -1))
    bind(Panel.DETAIL, keys.EDIT, edit_entry)
    bind(Panel.DETAIL, keys.DELETE, confirm_delete_entry)
    bind(Panel.DETAIL, keys.DOWN, lambda m: move_entry(m, 1))
    bind(Panel.DETAIL, keys.UP, lambda m: move_entry(m, -1))
    return table
