from datetime import datetime, timedelta

import pytest

from rondo import config, db
from rondo.app import Defer, KeyMsg, Model
from rondo.focus import FocusStore
from rondo.journal import JournalStore
from rondo.lib import clock
from rondo.tasks import TaskStore


@pytest.fixture
def tmp_rondo_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "RONDO_DIR", tmp_path)
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "rondo.db")
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.json")
    monkeypatch.setattr(config, "BACKUP_DIR", tmp_path / "backups")
    monkeypatch.setattr(config, "EXPORT_DIR", tmp_path / "exports")
    monkeypatch.setattr(config, "LOG_PATH", tmp_path / "rondo.log")
    db.init()
    return tmp_path


@pytest.fixture
def store(tmp_rondo_dir):
    return TaskStore()


@pytest.fixture
def journal(tmp_rondo_dir):
    return JournalStore()


@pytest.fixture
def focus(tmp_rondo_dir):
    return FocusStore()


class FrozenClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def frozen_clock(monkeypatch):
    fake = FrozenClock(datetime(2025, 6, 10, 9, 0, 0))
    monkeypatch.setattr(clock, "now", fake)
    return fake


class Harness:
    """Drives a Model the way the runtime would, running deferred work inline."""

    def __init__(self, model: Model):
        self.model = model
        self.cmds: list = []

    def run(self, cmds) -> list:
        pending = list(cmds)
        out = []
        while pending:
            cmd = pending.pop(0)
            if isinstance(cmd, Defer):
                pending.extend(self.model.update(cmd.fn()))
            else:
                out.append(cmd)
        self.cmds = out
        return out

    def start(self) -> "Harness":
        self.run(self.model.init())
        return self

    def press(self, *keys: str) -> list:
        out = []
        for key in keys:
            out = self.run(self.model.update(KeyMsg(key)))
        return out

    def type(self, text: str) -> None:
        for ch in text:
            self.press("space" if ch == " " else ch)

    def send(self, msg) -> list:
        return self.run(self.model.update(msg))


@pytest.fixture
def harness(store, journal, focus, tmp_rondo_dir):
    model = Model(store, journal, focus, config_path=tmp_rondo_dir / "config.json")
    return Harness(model).start()
