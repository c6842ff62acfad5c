from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from models import MonthKey

SALARY_PERIOD_START_DAY = 26
DEFAULT_DAYS = 31


class WindowMode(Enum):
    TRAILING = "trailing"
    SALARY_PERIOD = "salary_period"


@dataclass(frozen=True)
class ReportingWindow:
    start_date: date
    end_date: date
    months: tuple

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def _shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def months_between(start_date: date, end_date: date):
    """Distinct (month, year) pairs touched by [start_date, end_date], oldest first."""
    months = []
    # Walk from day 1 so advancing a month never overflows (Jan 31 -> Feb 31).
    current = start_date.replace(day=1)
    while current <= end_date:
        key = MonthKey(current.month, current.year)
        if key not in months:
            months.append(key)
        year, month = _shift_month(current.year, current.month, 1)
        current = current.replace(year=year, month=month)
    return tuple(months)


def trailing_window(today: date, days: int = DEFAULT_DAYS) -> ReportingWindow:
    start_date = today - timedelta(days=max(days, 0))
    return ReportingWindow(start_date, today, months_between(start_date, today))


def salary_period_window(today: date) -> ReportingWindow:
    """26th of one month to the 25th of the next, containing today."""
    if today.day >= SALARY_PERIOD_START_DAY:
        start_year, start_month = today.year, today.month
    else:
        start_year, start_month = _shift_month(today.year, today.month, -1)
    end_year, end_month = _shift_month(start_year, start_month, 1)

    start_date = date(start_year, start_month, SALARY_PERIOD_START_DAY)
    end_date = date(end_year, end_month, SALARY_PERIOD_START_DAY - 1)
    return ReportingWindow(start_date, end_date, months_between(start_date, end_date))


def get_reporting_window(today: date, mode: WindowMode = WindowMode.TRAILING, days: int = DEFAULT_DAYS) -> ReportingWindow:
    if mode is WindowMode.SALARY_PERIOD:
        return salary_period_window(today)
    return trailing_window(today, days)
