import sqlite3
import sys
from pathlib import Path

import fncli

from . import backup, db
from .core.errors import RondoError
from .logging_setup import setup_logging
from .tasks import format_task, list_tasks


def main():
    setup_logging()
    try:
        db.init()
    except (sqlite3.Error, OSError, ValueError) as e:
        sys.stderr.write(f"cannot open database: {e}\n")
        sys.exit(1)
    backup.daily_backup()
    fncli.autodiscover(Path(__file__).parent, "rondo")

    user_args = sys.argv[1:]
    if not user_args:
        for t in list_tasks("active"):
            print(format_task(t))
        return
    argv = ["rondo", *user_args]
    try:
        code = fncli.dispatch(argv)
    except (RondoError, sqlite3.Error) as e:
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
