import functools
import logging
import sqlite3
from collections.abc import Callable

from rondo.core.errors import NotFoundError, RondoError

from .modes import NORMAL

logger = logging.getLogger(__name__)


def guarded(fn: Callable) -> Callable:
    """Turn store failures inside a handler into a status message.

    Stale references become a plain notice; anything else is reported as an
    error. Either way the controller drops back to Normal mode.
    """

    @functools.wraps(fn)
    def wrapper(m, *args):
        try:
            return fn(m, *args)
        except NotFoundError as e:
            m.mode = NORMAL
            return m.set_status(str(e).capitalize())
        except (RondoError, sqlite3.Error) as e:
            logger.warning("%s failed: %s", fn.__name__, e)
            m.mode = NORMAL
            return m.set_error(e)

    return wrapper
