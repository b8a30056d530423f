from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Tuple, Union

import pytz
from dateutil.relativedelta import relativedelta

from focusflow.core.models import ValidationError

DateLike = Union[date, datetime, str]


def utcnow() -> datetime:
    """Naive UTC timestamp, the format stored in the database"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_local(tz_name: str = "UTC") -> datetime:
    return datetime.now(pytz.timezone(tz_name))


def today_local(tz_name: str = "UTC") -> date:
    return now_local(tz_name).date()


def to_date(value: DateLike) -> date:
    """Accept a date, a datetime or an ISO string; anything else is invalid"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError("Invalid date provided")


def format_time(value: Union[time, str, None]) -> str:
    """HH:MM for timeline display"""
    if value is None:
        return ""
    if isinstance(value, str):
        value = time.fromisoformat(value)
    return value.strftime("%H:%M")


def parse_time(value: Union[time, str]) -> time:
    """Accept a time or an HH:MM[:SS] string"""
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            return time.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError("Invalid time provided")


def day_bounds_utc(day: date, tz_name: str = "UTC") -> Tuple[datetime, datetime]:
    """[start, end) of a local calendar day as naive UTC datetimes"""
    tz = pytz.timezone(tz_name)
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return (
        start.astimezone(pytz.utc).replace(tzinfo=None),
        end.astimezone(pytz.utc).replace(tzinfo=None),
    )


def month_bounds(day: date) -> Tuple[date, date]:
    first = day.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first, last


def week_bounds(day: date) -> Tuple[date, date]:
    """Sunday-to-Saturday week containing the day"""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def add_months(day: date, months: int) -> date:
    return day + relativedelta(months=months)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
