import contextlib
import logging
import sqlite3
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from fncli import cli

from . import config
from .core.errors import RondoError
from .lib import clock

logger = logging.getLogger(__name__)

_SKIP_TABLES = {"_migrations", "sqlite_sequence"}
_RETAIN_DAYS = 30
_PREFIX = "backup-"


def _backup_name(day: date) -> str:
    return f"{_PREFIX}{day.isoformat()}.db"


def _backup_day(path: Path) -> date | None:
    if not (path.name.startswith(_PREFIX) and path.suffix == ".db"):
        return None
    try:
        return date.fromisoformat(path.stem.removeprefix(_PREFIX))
    except ValueError:
        return None


def _sqlite_backup(src: Path, dst: Path) -> None:
    src_conn = sqlite3.connect(src, timeout=30)
    dst_conn = sqlite3.connect(dst)
    try:
        src_conn.backup(dst_conn)
    finally:
        dst_conn.close()
        src_conn.close()


def _row_counts(db_path: Path) -> dict[str, int]:
    try:
        conn = sqlite3.connect(str(db_path), timeout=2)
        try:
            tables = [
                row[0]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
                )
                if row[0] not in _SKIP_TABLES
            ]
            counts = {}
            for table in tables:
                with contextlib.suppress(sqlite3.OperationalError):
                    counts[table] = conn.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]  # noqa: S608
            return counts
        finally:
            conn.close()
    except sqlite3.DatabaseError:
        return {}


def _integrity_ok(db_path: Path) -> bool:
    try:
        conn = sqlite3.connect(str(db_path), timeout=2)
        try:
            return conn.execute("PRAGMA integrity_check").fetchone()[0] == "ok"
        finally:
            conn.close()
    except sqlite3.DatabaseError:
        return False


def _validate_backup(dst: Path, src: Path) -> tuple[bool, str]:
    dst_counts = _row_counts(dst)
    src_counts = _row_counts(src)
    for table, src_count in src_counts.items():
        dst_count = dst_counts.get(table, 0)
        if dst_count < src_count:
            return False, f"table {table} has {src_count} rows in source but {dst_count} in backup"
    return True, "ok"


def run_backup(today: date | None = None) -> dict[str, Any]:
    """Write today's backup unless it already exists."""
    today = today or clock.today()
    src = config.DB_PATH
    if not src.exists():
        return {"path": None, "skipped": False, "rows": 0, "error": "source db missing"}

    config.BACKUP_DIR.mkdir(parents=True, exist_ok=True)
    dst = config.BACKUP_DIR / _backup_name(today)
    if dst.exists():
        return {"path": dst, "skipped": True, "rows": sum(_row_counts(dst).values())}

    _sqlite_backup(src, dst)

    if not _integrity_ok(dst):
        dst.unlink(missing_ok=True)
        return {"path": None, "skipped": False, "rows": 0, "error": "backup failed integrity check"}

    valid, reason = _validate_backup(dst, src)
    if not valid:
        dst.unlink(missing_ok=True)
        return {"path": None, "skipped": False, "rows": 0, "error": reason}

    logger.info("backup written to %s", dst)
    return {"path": dst, "skipped": False, "rows": sum(_row_counts(dst).values())}


def run_prune(retain_days: int = _RETAIN_DAYS, today: date | None = None) -> int:
    """Delete daily backups older than retain_days. Returns how many were removed."""
    backup_dir = config.BACKUP_DIR
    if not backup_dir.exists():
        return 0
    cutoff = (today or clock.today()) - timedelta(days=retain_days)
    removed = 0
    for path in sorted(backup_dir.iterdir()):
        day = _backup_day(path)
        if day is not None and day < cutoff:
            path.unlink()
            removed += 1
    if removed:
        logger.info("pruned %d old backups", removed)
    return removed


def daily_backup() -> None:
    """Start-up hook: back up and prune, logging instead of failing."""
    try:
        result = run_backup()
        if result.get("error"):
            logger.warning("backup skipped: %s", result["error"])
            return
        run_prune()
    except (OSError, sqlite3.Error) as e:
        logger.warning("backup failed: %s", e)


@cli("rondo", name="backup")
def backup() -> None:
    """Create today's verified database backup"""
    result = run_backup()
    if result.get("error"):
        raise RondoError(f"backup failed: {result['error']}")
    suffix = " (already exists)" if result["skipped"] else ""
    print(f"{result['path']}{suffix}")
    print(f"  {result['rows']} rows")
    removed = run_prune()
    if removed:
        print(f"  pruned {removed} old backups")
