import sqlite3

import pytest

from rondo import db


def test_init_creates_schema(tmp_rondo_dir):
    with db.get_db() as conn:
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {
        "tasks",
        "subtasks",
        "tags",
        "time_logs",
        "task_dependencies",
        "journal_notes",
        "journal_entries",
        "focus_sessions",
    } <= tables


def test_init_is_idempotent(tmp_rondo_dir):
    assert db.init() == []


def test_migrations_recorded_in_order(tmp_rondo_dir):
    with db.get_db() as conn:
        names = [r[0] for r in conn.execute("SELECT name FROM _migrations ORDER BY id")]
    assert names == [name for name, _ in db.load_migrations()]


def test_fresh_db_reports_applied(tmp_path, monkeypatch):
    monkeypatch.setattr("rondo.config.BACKUP_DIR", tmp_path / "backups")
    applied = db.init(tmp_path / "fresh.db")
    assert applied == ["001_tasks", "002_journal", "003_focus"]
    assert not list((tmp_path / "backups").glob("migrations/*.backup"))


def test_get_db_rolls_back_on_error(tmp_rondo_dir):
    with pytest.raises(sqlite3.IntegrityError):
        with db.get_db() as conn:
            conn.execute(
                "INSERT INTO tasks (title, created_at, updated_at) VALUES ('x', '2025-01-01', '2025-01-01')"
            )
            conn.execute("INSERT INTO tasks (title) VALUES (NULL)")
    with db.get_db() as conn:
        assert conn.execute("SELECT COUNT(*) FROM tasks").fetchone()[0] == 0


def test_foreign_keys_enforced(tmp_rondo_dir):
    with pytest.raises(sqlite3.IntegrityError):
        with db.get_db() as conn:
            conn.execute("INSERT INTO subtasks (task_id, title) VALUES (999, 'orphan')")


def test_data_loss_check():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (x)")
    with pytest.raises(ValueError, match="data loss"):
        db._check_data_loss(conn, {"t": 3})


def test_new_migration_on_existing_db_keeps_rows(tmp_rondo_dir, monkeypatch):
    with db.get_db() as conn:
        conn.execute(
            "INSERT INTO tasks (title, created_at, updated_at) VALUES ('x', '2025-01-01', '2025-01-01')"
        )
    shipped = db.load_migrations()
    monkeypatch.setattr(db, "load_migrations", lambda: [*shipped, ("004_extra", "CREATE TABLE extra (x);")])
    assert db.init() == ["004_extra"]
    with db.get_db() as conn:
        assert conn.execute("SELECT COUNT(*) FROM tasks").fetchone()[0] == 1
    assert not list((tmp_rondo_dir / "backups").glob("migrations/*.backup"))
