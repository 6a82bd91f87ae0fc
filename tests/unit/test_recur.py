from datetime import date

from rondo.core.models import RecurFreq, Task
from rondo.lib.recur import add_months, next_due_date


def recurring(due, freq, interval=1):
    return Task(id=1, title="t", due_date=due, recur_freq=freq, recur_interval=interval)


def test_monthly_rolls_overflow_into_next_month():
    assert next_due_date(recurring(date(2025, 1, 31), RecurFreq.MONTHLY)) == date(2025, 3, 3)


def test_monthly_regular_day():
    assert next_due_date(recurring(date(2025, 1, 15), RecurFreq.MONTHLY, 2)) == date(2025, 3, 15)


def test_yearly_from_leap_day_rolls_to_march():
    assert next_due_date(recurring(date(2024, 2, 29), RecurFreq.YEARLY)) == date(2025, 3, 1)


def test_daily_and_weekly():
    assert next_due_date(recurring(date(2025, 6, 1), RecurFreq.DAILY)) == date(2025, 6, 2)
    assert next_due_date(recurring(date(2025, 6, 1), RecurFreq.WEEKLY, 2)) == date(2025, 6, 15)


def test_non_positive_interval_treated_as_one():
    assert next_due_date(recurring(date(2025, 6, 1), RecurFreq.DAILY, 0)) == date(2025, 6, 2)
    assert next_due_date(recurring(date(2025, 6, 1), RecurFreq.DAILY, -3)) == date(2025, 6, 2)


def test_none_frequency_keeps_base_date():
    assert next_due_date(recurring(date(2025, 6, 1), RecurFreq.NONE)) == date(2025, 6, 1)


def test_missing_due_date_counts_from_today(frozen_clock):
    assert next_due_date(recurring(None, RecurFreq.DAILY)) == date(2025, 6, 11)


def test_add_months_across_year_boundary():
    assert add_months(date(2025, 12, 31), 2) == date(2026, 3, 3)
    assert add_months(date(2025, 11, 30), 1) == date(2025, 12, 30)
