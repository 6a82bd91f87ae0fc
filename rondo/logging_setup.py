import logging
import sys
from pathlib import Path

from . import config


class _ConsoleFilter(logging.Filter):
    """Keep the terminal quiet: rondo warnings and third-party errors only."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("rondo."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_path: Path | None = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with a stderr handler for warnings and a file handler
    holding everything. Call once at start-up.
    """
    log_path = log_path if log_path else config.LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_path), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
