"""Date manipulation utilities"""

from datetime import date, timedelta
from dateutil.relativedelta import relativedelta


def add_days(from_date: date, days: int) -> date:
    """Add calendar days to a date"""
    return from_date + timedelta(days=days)


def add_months(from_date: date, months: int) -> date:
    """
    Add calendar months, clamping to the last day of shorter months.

    Always offset from the anchor (start) date so that a schedule starting
    on the 31st lands on the 31st again whenever the month allows it.
    """
    return from_date + relativedelta(months=months)
