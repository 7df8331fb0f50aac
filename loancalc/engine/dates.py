"""Calendar helpers for payment dates.

Pure functions. No I/O.
"""

import calendar
from datetime import date


def add_months(dt: date, months: int) -> date:
    """Return the date ``months`` after ``dt``, clamping the day to month end."""
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (days ignored)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def payment_month(loan_start: date, when: date) -> int:
    """1-based payment number falling in the calendar month of ``when``."""
    return months_between(loan_start, when) + 1
