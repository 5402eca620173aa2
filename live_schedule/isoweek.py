"""ISO-8601 week arithmetic."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

_KEY_RE = re.compile(r"^\s*(\d{4})-[Ww]?(\d{1,2})\s*$")


@dataclass(frozen=True, order=True)
class IsoWeek:
    year: int
    week: int

    def __str__(self) -> str:
        return key(self)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def iso_week_of(value: date | datetime) -> IsoWeek:
    """Return the ISO week containing ``value``.

    The date is moved to the Thursday of its Monday-based week; that
    Thursday's calendar year is the ISO year, and the week number counts
    Thursdays from the first Thursday of that year.
    """
    day = _as_date(value)
    thursday = day - timedelta(days=day.weekday()) + timedelta(days=3)
    iso_year = thursday.year
    jan1 = date(iso_year, 1, 1)
    first_thursday = jan1 + timedelta(days=(3 - jan1.weekday()) % 7)
    # both dates are Thursdays, so the difference is a whole number of weeks
    week = 1 + (thursday - first_thursday).days // 7
    return IsoWeek(iso_year, week)


def current_iso_week(now: Optional[datetime] = None) -> IsoWeek:
    return iso_week_of(now or datetime.now())


def week_start_date(week: IsoWeek) -> datetime:
    """Monday of ``week`` at local midnight."""
    jan4 = date(week.year, 1, 4)
    week1_monday = jan4 - timedelta(days=jan4.weekday())
    monday = week1_monday + timedelta(weeks=week.week - 1)
    return datetime.combine(monday, time())


def weeks_in_year(year: int) -> int:
    # Dec 28 always falls in the last ISO week of its year
    return iso_week_of(date(year, 12, 28)).week


def compare(a: IsoWeek, b: IsoWeek) -> int:
    left = (a.year, a.week)
    right = (b.year, b.week)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def key(week: IsoWeek) -> str:
    return f"{week.year}-{week.week:02d}"


def parse_key(text: str) -> IsoWeek:
    """Parse ``YYYY-WW`` (or ``YYYY-Www``) into an :class:`IsoWeek`."""
    match = _KEY_RE.match(text or "")
    if not match:
        raise ValueError(f"Invalid ISO week: {text!r}")
    year, week = int(match.group(1)), int(match.group(2))
    if not 1 <= week <= weeks_in_year(year):
        raise ValueError(f"Week {week} out of range for {year}")
    return IsoWeek(year, week)


def previous_week(week: IsoWeek) -> IsoWeek:
    return iso_week_of(week_start_date(week) - timedelta(weeks=1))


def next_week(week: IsoWeek) -> IsoWeek:
    return iso_week_of(week_start_date(week) + timedelta(weeks=1))


def format_label(week: IsoWeek, locale: Optional[str] = None) -> str:
    if locale and locale.lower().startswith("zh"):
        return f"{week.year}年第{week.week}周"
    return f"{week.year} W{week.week:02d}"


def week_range_label(week: IsoWeek) -> str:
    start = week_start_date(week)
    end = start + timedelta(days=6)
    return f"{start:%b %d} - {end:%b %d, %Y}"
