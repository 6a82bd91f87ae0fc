from .messages import (
    BlinkMsg,
    ClearStatusMsg,
    Cmd,
    Defer,
    ExportDone,
    FocusTickMsg,
    KeyMsg,
    NotesLoaded,
    Quit,
    ResizeMsg,
    TasksLoaded,
    Tick,
)
from .model import Model, create_model
from .snapshot import Snapshot

__all__ = [
    "BlinkMsg",
    "ClearStatusMsg",
    "Cmd",
    "Defer",
    "ExportDone",
    "FocusTickMsg",
    "KeyMsg",
    "Model",
    "NotesLoaded",
    "Quit",
    "ResizeMsg",
    "Snapshot",
    "TasksLoaded",
    "Tick",
    "create_model",
]
