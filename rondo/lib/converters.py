from datetime import date, datetime, timedelta
from typing import cast

from rondo.core.models import (
    Entry,
    Note,
    Priority,
    RecurFreq,
    Session,
    Status,
    Subtask,
    Task,
    TimeLog,
)

Row = tuple[object, ...]


def _parse_date(val) -> date | None:
    if isinstance(val, str) and val:
        return date.fromisoformat(val.split("T")[0])
    return None


def _parse_datetime(val) -> datetime:
    if isinstance(val, str) and val:
        return datetime.fromisoformat(val)
    return datetime.min


def _parse_datetime_optional(val) -> datetime | None:
    if isinstance(val, str) and val:
        return datetime.fromisoformat(val)
    return None


def row_to_task(row: Row) -> Task:
    """
    Converts a raw row from the tasks table into a Task without relations.
    Expected row format: (id, title, description, status, priority, due_date, recur_freq, recur_interval, created_at, updated_at)
    """
    return Task(
        id=cast(int, row[0]),
        title=cast(str, row[1]),
        description=cast(str, row[2] or ""),
        status=Status(cast(int, row[3])),
        priority=Priority(cast(int, row[4])),
        due_date=_parse_date(row[5]),
        recur_freq=RecurFreq(cast(int, row[6])),
        recur_interval=cast(int, row[7]) or 1,
        created_at=_parse_datetime(row[8]),
        updated_at=_parse_datetime(row[9]),
    )


def row_to_subtask(row: Row) -> Subtask:
    return Subtask(
        id=cast(int, row[0]),
        task_id=cast(int, row[1]),
        title=cast(str, row[2]),
        completed=bool(row[3]),
        position=cast(int, row[4]),
    )


def row_to_time_log(row: Row) -> TimeLog:
    return TimeLog(
        id=cast(int, row[0]),
        task_id=cast(int, row[1]),
        duration=timedelta(seconds=cast(int, row[2])),
        note=cast(str, row[3] or ""),
        logged_at=_parse_datetime(row[4]),
    )


def row_to_note(row: Row) -> Note:
    return Note(
        id=cast(int, row[0]),
        date=date.fromisoformat(cast(str, row[1])),
        hidden=bool(row[2]),
        created_at=_parse_datetime(row[3]),
        updated_at=_parse_datetime(row[4]),
    )


def row_to_entry(row: Row) -> Entry:
    return Entry(
        id=cast(int, row[0]),
        note_id=cast(int, row[1]),
        body=cast(str, row[2]),
        created_at=_parse_datetime(row[3]),
    )


def row_to_session(row: Row) -> Session:
    return Session(
        id=cast(int, row[0]),
        task_id=cast(int, row[1]) if row[1] else None,
        duration=timedelta(seconds=cast(int, row[2])),
        started_at=_parse_datetime(row[3]),
        completed_at=_parse_datetime_optional(row[4]),
    )
