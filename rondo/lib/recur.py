from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from rondo.core.models import RecurFreq, Task

from . import clock

__all__ = ["add_months", "next_due_date"]


def add_months(base: date, months: int) -> date:
    """Calendar month arithmetic that rolls day overflow into the next month.

    2025-01-31 + 1 month is 2025-03-03, not a clamped 2025-02-28.
    """
    first = base.replace(day=1) + relativedelta(months=months)
    return first + timedelta(days=base.day - 1)


def next_due_date(task: Task) -> date:
    base = task.due_date or clock.today()
    interval = task.recur_interval if task.recur_interval > 0 else 1
    freq = task.recur_freq
    if freq is RecurFreq.DAILY:
        return base + timedelta(days=interval)
    if freq is RecurFreq.WEEKLY:
        return base + timedelta(weeks=interval)
    if freq is RecurFreq.MONTHLY:
        return add_months(base, interval)
    if freq is RecurFreq.YEARLY:
        return add_months(base, 12 * interval)
    return base
