import dataclasses
from datetime import timedelta
from pathlib import Path

from . import db
from .core.errors import NotFoundError
from .core.models import Session
from .lib import clock
from .lib.converters import row_to_session

__all__ = ["FocusStore"]

_SESSION_COLS = "id, task_id, duration, started_at, completed_at"


class FocusStore:
    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def create(self, session: Session) -> Session:
        with db.get_db(self.db_path) as conn:
            cursor = conn.execute(
                "INSERT INTO focus_sessions (task_id, duration, started_at) VALUES (?, ?, ?)",
                (
                    session.task_id,
                    int(session.duration.total_seconds()),
                    session.started_at.isoformat(),
                ),
            )
        return dataclasses.replace(session, id=cursor.lastrowid or 0)

    def complete(self, session_id: int) -> None:
        with db.get_db(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE focus_sessions SET completed_at = ? WHERE id = ?",
                (clock.now().isoformat(), session_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"focus session {session_id} not found")

    def list_by_task(self, task_id: int) -> list[Session]:
        with db.get_db(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_SESSION_COLS} FROM focus_sessions WHERE task_id = ? ORDER BY started_at DESC",  # noqa: S608
                (task_id,),
            ).fetchall()
        return [row_to_session(r) for r in rows]

    def completions_by_day(self, days: int) -> dict[str, int]:
        """Completed sessions per ISO day over the trailing window, oldest day first."""
        today = clock.today()
        start = today - timedelta(days=days - 1)
        counts = {(start + timedelta(days=i)).isoformat(): 0 for i in range(days)}
        with db.get_db(self.db_path) as conn:
            rows = conn.execute(
                "SELECT substr(completed_at, 1, 10) AS day, COUNT(*) FROM focus_sessions "
                "WHERE completed_at IS NOT NULL AND substr(completed_at, 1, 10) >= ? GROUP BY day",
                (start.isoformat(),),
            ).fetchall()
        for day, count in rows:
            if day in counts:
                counts[day] = count
        return counts

    def today_count(self) -> int:
        with db.get_db(self.db_path) as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM focus_sessions WHERE completed_at IS NOT NULL AND substr(completed_at, 1, 10) = ?",
                (clock.today().isoformat(),),
            ).fetchone()[0]
