import logging

import pytest

from rondo.logging_setup import _ConsoleFilter, setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_file_handler_keeps_debug(tmp_path, restore_root):
    log_path = tmp_path / "logs" / "rondo.log"
    setup_logging(log_path=log_path)
    logging.getLogger("rondo.tasks").debug("created task %d", 1)
    for h in logging.getLogger().handlers:
        h.flush()
    assert "DEBUG rondo.tasks: created task 1" in log_path.read_text()


def test_console_filter_quiets_third_party():
    f = _ConsoleFilter()

    def record(name, level):
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert f.filter(record("rondo.db", logging.WARNING))
    assert not f.filter(record("urllib3", logging.WARNING))
    assert f.filter(record("urllib3", logging.ERROR))
