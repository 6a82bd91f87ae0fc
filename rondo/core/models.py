import dataclasses
from datetime import date, datetime, timedelta
from enum import IntEnum

DEFAULT_FOCUS_DURATION = timedelta(minutes=25)


class Status(IntEnum):
    PENDING = 0
    IN_PROGRESS = 1
    DONE = 2

    def next(self) -> "Status":
        """Pending -> In Progress -> Done -> Pending."""
        return Status((self.value + 1) % len(Status))

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def icon(self) -> str:
        return _STATUS_ICONS[self]


_STATUS_LABELS = {
    Status.PENDING: "Pending",
    Status.IN_PROGRESS: "In Progress",
    Status.DONE: "Done",
}
_STATUS_ICONS = {Status.PENDING: "○", Status.IN_PROGRESS: "◐", Status.DONE: "✓"}


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    URGENT = 3

    @property
    def label(self) -> str:
        return self.name.title()

    @property
    def badge(self) -> str:
        return _PRIORITY_BADGES[self]

    @classmethod
    def parse(cls, value: str) -> "Priority":
        key = value.strip().lower()
        for p in cls:
            if key in (p.name.lower(), p.badge.lower().rstrip("!")):
                return p
        raise ValueError(f"unknown priority: {value!r}")


_PRIORITY_BADGES = {
    Priority.LOW: "LOW",
    Priority.MEDIUM: "MED",
    Priority.HIGH: "HIGH",
    Priority.URGENT: "URG!",
}


class RecurFreq(IntEnum):
    NONE = 0
    DAILY = 1
    WEEKLY = 2
    MONTHLY = 3
    YEARLY = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> "RecurFreq":
        """Unknown names map to NONE."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            return cls.NONE


@dataclasses.dataclass(frozen=True)
class Subtask:
    id: int
    task_id: int
    title: str
    completed: bool = False
    position: int = 0


@dataclasses.dataclass(frozen=True)
class TimeLog:
    id: int
    task_id: int
    duration: timedelta
    note: str
    logged_at: datetime


@dataclasses.dataclass(frozen=True)
class Task:
    id: int
    title: str
    description: str = ""
    status: Status = Status.PENDING
    priority: Priority = Priority.LOW
    due_date: date | None = None
    created_at: datetime = datetime.min
    updated_at: datetime = datetime.min
    recur_freq: RecurFreq = RecurFreq.NONE
    recur_interval: int = 1
    subtasks: list[Subtask] = dataclasses.field(default_factory=list, hash=False)
    tags: list[str] = dataclasses.field(default_factory=list, hash=False)
    blocked_by: list[int] = dataclasses.field(default_factory=list, hash=False)
    time_logs: list[TimeLog] = dataclasses.field(default_factory=list, hash=False)

    @property
    def recurring(self) -> bool:
        return self.recur_freq is not RecurFreq.NONE

    @property
    def total_logged(self) -> timedelta:
        return sum((log.duration for log in self.time_logs), timedelta())


@dataclasses.dataclass(frozen=True)
class Entry:
    id: int
    note_id: int
    body: str
    created_at: datetime


@dataclasses.dataclass(frozen=True)
class Note:
    id: int
    date: date
    hidden: bool
    created_at: datetime
    updated_at: datetime
    entries: list[Entry] = dataclasses.field(default_factory=list, hash=False)


@dataclasses.dataclass(frozen=True)
class Session:
    id: int
    started_at: datetime
    task_id: int | None = None
    duration: timedelta = DEFAULT_FOCUS_DURATION
    completed_at: datetime | None = None

    def elapsed(self, now: datetime) -> timedelta:
        return min(max(now - self.started_at, timedelta()), self.duration)

    def remaining(self, now: datetime) -> timedelta:
        return self.duration - self.elapsed(now)


@dataclasses.dataclass(frozen=True)
class StatusChange:
    task: Task
    previous: Status
    spawned: Task | None = None
