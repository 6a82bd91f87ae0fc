"""Runtime boundary: messages flow into Model.update, commands flow back out.

The runtime decodes terminal input into KeyMsg/ResizeMsg, fires Tick commands
after their delay and runs Defer commands off the input path, feeding each
result back in as a message.
"""

import dataclasses
from collections.abc import Callable
from pathlib import Path

from rondo.core.models import Note, Task


@dataclasses.dataclass(frozen=True)
class KeyMsg:
    key: str


@dataclasses.dataclass(frozen=True)
class ResizeMsg:
    width: int
    height: int


@dataclasses.dataclass(frozen=True)
class BlinkMsg:
    form_id: int


@dataclasses.dataclass(frozen=True)
class ClearStatusMsg:
    pass


@dataclasses.dataclass(frozen=True)
class FocusTickMsg:
    session_id: int


@dataclasses.dataclass(frozen=True)
class TasksLoaded:
    tasks: list[Task] = dataclasses.field(default_factory=list, hash=False)
    error: Exception | None = None


@dataclasses.dataclass(frozen=True)
class NotesLoaded:
    notes: list[Note] = dataclasses.field(default_factory=list, hash=False)
    error: Exception | None = None


@dataclasses.dataclass(frozen=True)
class ExportDone:
    path: Path | None = None
    error: Exception | None = None


Msg = KeyMsg | ResizeMsg | BlinkMsg | ClearStatusMsg | FocusTickMsg | TasksLoaded | NotesLoaded | ExportDone

BACKGROUND_MSGS = (ClearStatusMsg, FocusTickMsg, TasksLoaded, NotesLoaded, ExportDone)


@dataclasses.dataclass(frozen=True)
class Tick:
    """Deliver msg after delay seconds, unconditionally."""

    delay: float
    msg: Msg


@dataclasses.dataclass(frozen=True)
class Defer:
    """Run fn outside the update path; its return value re-enters as a message."""

    fn: Callable[[], Msg]


@dataclasses.dataclass(frozen=True)
class Quit:
    pass


Cmd = Tick | Defer | Quit
