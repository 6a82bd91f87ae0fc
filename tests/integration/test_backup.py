from datetime import date

from rondo import backup, config
from rondo.core.models import Task


def test_backup_writes_verified_copy(store):
    store.create(Task(id=0, title="keep me"))
    result = backup.run_backup(today=date(2025, 6, 10))
    assert result["path"] == config.BACKUP_DIR / "backup-2025-06-10.db"
    assert result["path"].exists()
    assert result["skipped"] is False
    assert result["rows"] >= 1


def test_second_backup_same_day_skipped(store):
    backup.run_backup(today=date(2025, 6, 10))
    result = backup.run_backup(today=date(2025, 6, 10))
    assert result["skipped"] is True


def test_missing_source(tmp_rondo_dir, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", tmp_rondo_dir / "absent.db")
    result = backup.run_backup()
    assert result["error"] == "source db missing"


def test_prune_removes_only_old_daily_backups(tmp_rondo_dir):
    config.BACKUP_DIR.mkdir(parents=True, exist_ok=True)
    for name in ["backup-2025-04-01.db", "backup-2025-06-01.db", "notes.txt"]:
        (config.BACKUP_DIR / name).write_text("")
    removed = backup.run_prune(retain_days=30, today=date(2025, 6, 10))
    assert removed == 1
    assert sorted(p.name for p in config.BACKUP_DIR.iterdir() if p.is_file()) == [
        "backup-2025-06-01.db",
        "notes.txt",
    ]


def test_daily_backup_never_raises(tmp_rondo_dir, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", tmp_rondo_dir / "absent.db")
    backup.daily_backup()
