from datetime import date, datetime, time, timedelta
from fractions import Fraction
from typing import Iterator, Union

from envelopes.domain import WeekRange

DateLike = Union[date, datetime, str]

_LAST_INSTANT = time(23, 59, 59, 999000)


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def weekday_index(d: DateLike) -> int:
    # Sunday=0 ... Saturday=6
    return to_date(d).isoweekday() % 7


def get_week_start(d: DateLike) -> date:
    day = to_date(d)
    return day - timedelta(days=weekday_index(day))


def get_week_range(d: DateLike) -> WeekRange:
    """Sunday 00:00:00.000 through Saturday 23:59:59.999 of the week containing d."""
    start = get_week_start(d)
    end = start + timedelta(days=6)
    return WeekRange(
        start=datetime.combine(start, time.min),
        end=datetime.combine(end, _LAST_INSTANT),
    )


def get_week_end(d: DateLike) -> date:
    return get_week_start(d) + timedelta(days=6)


def get_remaining_days_percent(d: DateLike) -> Fraction:
    """Share of the week still ahead, today included: Sunday 7/7 down to Saturday 1/7."""
    return Fraction(7 - weekday_index(d), 7)


def get_week_number(d: DateLike) -> int:
    """Sunday-based week of the year where the week holding January 1st is week 1.

    The last days of December belong to week 1 of the next year when their
    Sunday-Saturday span reaches January 1st.
    """
    start = get_week_start(d)
    week_year = (start + timedelta(days=6)).year
    first_week_start = get_week_start(date(week_year, 1, 1))
    return (start - first_week_start).days // 7 + 1


def _short_date(d: date) -> str:
    return f"{d.month}/{d.day}/{d.year}"


def format_week_label(d: DateLike) -> str:
    start = get_week_start(d)
    return f"{_short_date(start)} - {_short_date(start + timedelta(days=6))}"


def short_week_label(d: DateLike) -> str:
    return f"Wk {get_week_number(d)}"


def iterate_weeks(start: DateLike, end_exclusive: DateLike) -> Iterator[date]:
    # start is expected to already be a Sunday
    current = to_date(start)
    stop = to_date(end_exclusive)
    while current < stop:
        yield current
        current += timedelta(days=7)
