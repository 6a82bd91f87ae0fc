import dataclasses
import logging
import sqlite3
from collections import defaultdict
from pathlib import Path

from fncli import cli

from . import db
from .core.errors import NotFoundError, ValidationError
from .core.models import Entry, Note
from .lib import clock
from .lib.converters import row_to_entry, row_to_note

__all__ = ["JournalStore", "MAX_ENTRY_LENGTH"]

logger = logging.getLogger(__name__)

MAX_ENTRY_LENGTH = 2000

_NOTE_COLS = "id, date, hidden, created_at, updated_at"
_ENTRY_COLS = "id, note_id, body, created_at"


def _clean_body(body: str) -> str:
    body = body.strip()
    if not body:
        raise ValidationError("entry cannot be empty")
    if len(body) > MAX_ENTRY_LENGTH:
        raise ValidationError(f"entry exceeds {MAX_ENTRY_LENGTH} characters")
    return body


class JournalStore:
    """One note per calendar day, each holding timestamped entries."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def list_notes(self, include_hidden: bool = False) -> list[Note]:
        where = "" if include_hidden else "WHERE hidden = 0"
        with db.get_db(self.db_path) as conn:
            notes = [
                row_to_note(r)
                for r in conn.execute(
                    f"SELECT {_NOTE_COLS} FROM journal_notes {where} ORDER BY date DESC"  # noqa: S608
                )
            ]
            if not notes:
                return []
            ids = [n.id for n in notes]
            entries: dict[int, list[Entry]] = defaultdict(list)
            for row in conn.execute(
                f"SELECT {_ENTRY_COLS} FROM journal_entries WHERE note_id IN ({','.join('?' * len(ids))}) ORDER BY created_at, id",  # noqa: S608
                ids,
            ):
                entry = row_to_entry(row)
                entries[entry.note_id].append(entry)
        return [dataclasses.replace(n, entries=entries[n.id]) for n in notes]

    def get_or_create_today(self) -> Note:
        now = clock.now()
        today = now.date().isoformat()
        with db.get_db(self.db_path) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO journal_notes (date, hidden, created_at, updated_at) VALUES (?, 0, ?, ?)",
                (today, now.isoformat(), now.isoformat()),
            )
            row = conn.execute(
                f"SELECT {_NOTE_COLS} FROM journal_notes WHERE date = ?",  # noqa: S608
                (today,),
            ).fetchone()
            note = row_to_note(row)
            return dataclasses.replace(note, entries=self._entries(conn, note.id))

    def add_entry(self, note_id: int, body: str) -> Entry:
        body = _clean_body(body)
        now = clock.now()
        with db.get_db(self.db_path) as conn:
            self._touch(conn, note_id)
            cursor = conn.execute(
                "INSERT INTO journal_entries (note_id, body, created_at) VALUES (?, ?, ?)",
                (note_id, body, now.isoformat()),
            )
        return Entry(id=cursor.lastrowid or 0, note_id=note_id, body=body, created_at=now)

    def update_entry(self, entry_id: int, body: str) -> None:
        body = _clean_body(body)
        with db.get_db(self.db_path) as conn:
            note_id = self._entry_note(conn, entry_id)
            conn.execute("UPDATE journal_entries SET body = ? WHERE id = ?", (body, entry_id))
            self._touch(conn, note_id)

    def delete_entry(self, entry_id: int) -> None:
        with db.get_db(self.db_path) as conn:
            note_id = self._entry_note(conn, entry_id)
            conn.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
            self._touch(conn, note_id)

    def toggle_hidden(self, note_id: int) -> bool:
        """Flip the hidden flag and return the new value."""
        with db.get_db(self.db_path) as conn:
            row = conn.execute("SELECT hidden FROM journal_notes WHERE id = ?", (note_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"note {note_id} not found")
            hidden = not row[0]
            conn.execute(
                "UPDATE journal_notes SET hidden = ?, updated_at = ? WHERE id = ?",
                (hidden, clock.now().isoformat(), note_id),
            )
        return hidden

    def list_entries(self, note_id: int) -> list[Entry]:
        with db.get_db(self.db_path) as conn:
            return self._entries(conn, note_id)

    def _entries(self, conn: sqlite3.Connection, note_id: int) -> list[Entry]:
        return [
            row_to_entry(r)
            for r in conn.execute(
                f"SELECT {_ENTRY_COLS} FROM journal_entries WHERE note_id = ? ORDER BY created_at, id",  # noqa: S608
                (note_id,),
            )
        ]

    def _entry_note(self, conn: sqlite3.Connection, entry_id: int) -> int:
        row = conn.execute("SELECT note_id FROM journal_entries WHERE id = ?", (entry_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"entry {entry_id} not found")
        return row[0]

    def _touch(self, conn: sqlite3.Connection, note_id: int) -> None:
        cursor = conn.execute(
            "UPDATE journal_notes SET updated_at = ? WHERE id = ?", (clock.now().isoformat(), note_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"note {note_id} not found")


# ── cli ──────────────────────────────────────────────────────────────────────


@cli("rondo", name="journal", flags={"body": []})
def journal_cmd(body: list[str] | None = None):
    """Add an entry to today's journal note, or show today's note"""
    store = JournalStore()
    note = store.get_or_create_today()
    if body:
        entry = store.add_entry(note.id, " ".join(body))
        print(f"{entry.created_at.strftime('%H:%M')} {entry.body}")
        return
    if not note.entries:
        print("no entries today")
        return
    for e in note.entries:
        print(f"{e.created_at.strftime('%H:%M')} {e.body}")
