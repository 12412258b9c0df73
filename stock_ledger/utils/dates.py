"""
Calendar-date helpers shared by the write paths (sales, production)
and the reporting queries.

Sale and production dates represent a calendar day, not an instant. They
are stored as UTC midnight of that day so that no server or client time
zone can move them to the neighbouring day. Every filter and grouping key
on those columns must be built with the helpers below.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

from stock_ledger.exceptions import ValidationError

DateInput = Union[str, date, datetime]

# Last representable millisecond of a calendar day
END_OF_DAY = time(23, 59, 59, 999000)


def force_date_without_timezone(value: DateInput) -> datetime:
    """
    Normalize a date-like value to UTC midnight of its calendar day.

    Strings are read as ``YYYY-MM-DD`` (anything after the first ten
    characters, such as a time part, is ignored). For ``datetime`` values
    the year/month/day are taken as written, without converting time
    zones first.

    Raises:
        ValidationError: If the value cannot be read as a calendar date
    """
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    elif isinstance(value, str):
        try:
            day = date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    else:
        raise ValidationError(f"Invalid date value: {value!r}")

    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def format_calendar_date(value: Union[date, datetime]) -> str:
    """Format a normalized date back to ``YYYY-MM-DD``, read in UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return value.isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today(now: Optional[datetime] = None) -> datetime:
    """UTC midnight of the current calendar day."""
    return start_of_day(now or utc_now())


def start_of_day(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)


def start_of_month(moment: datetime) -> datetime:
    day = start_of_day(moment)
    return day.replace(day=1)


def day_range(start: DateInput, end: DateInput) -> Tuple[datetime, datetime]:
    """
    Inclusive range covering whole calendar days, from ``start`` 00:00:00.000
    to ``end`` 23:59:59.999 UTC.
    """
    start_dt = force_date_without_timezone(start)
    end_dt = datetime.combine(
        force_date_without_timezone(end).date(), END_OF_DAY, tzinfo=timezone.utc
    )
    return start_dt, end_dt


def days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)
