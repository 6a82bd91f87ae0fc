"""Single-slot undo. Each action knows how to reverse itself against the task store."""

import dataclasses

from rondo.core.models import Status, Task
from rondo.tasks import TaskStore


@dataclasses.dataclass(frozen=True)
class StatusRevert:
    task_id: int
    previous: Status
    title: str

    @property
    def description(self) -> str:
        return f'Undo status change on "{self.title}"'

    def apply(self, store: TaskStore) -> None:
        task = store.get(self.task_id)
        store.update(dataclasses.replace(task, status=self.previous))


@dataclasses.dataclass(frozen=True)
class TaskRestore:
    snapshot: Task

    @property
    def description(self) -> str:
        return f'Undo delete "{self.snapshot.title}"'

    def apply(self, store: TaskStore) -> None:
        store.restore(self.snapshot)


@dataclasses.dataclass(frozen=True)
class SubtaskRestore:
    task_id: int
    title: str
    completed: bool
    position: int

    @property
    def description(self) -> str:
        return f'Undo delete subtask "{self.title}"'

    def apply(self, store: TaskStore) -> None:
        store.restore_subtask(self.task_id, self.title, self.completed, self.position)


UndoAction = StatusRevert | TaskRestore | SubtaskRestore
