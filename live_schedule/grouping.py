"""Weekly grouping of schedule records."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from . import isoweek
from .isoweek import IsoWeek
from .models import ScheduleEvent, ScheduleRecord
from .records import Lookup, record_start, to_schedule_event

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

WeeklyGrouping = Dict[str, List[ScheduleEvent]]


def empty_grouping() -> WeeklyGrouping:
    return {day: [] for day in DAY_NAMES}


def group_by_day(
    records: Iterable[ScheduleRecord],
    performers: Optional[Lookup] = None,
    types: Optional[Lookup] = None,
) -> WeeklyGrouping:
    """Bucket records by local day of week.

    Records whose start time does not parse are left out. Every day key is
    present in the result; events inside a day are ordered by their
    zero-padded ``HH:MM`` label.
    """
    grouped = empty_grouping()
    for record in records:
        event = to_schedule_event(record, performers, types)
        if event is None:
            continue
        grouped[DAY_NAMES[event.start.weekday()]].append(event)

    for events in grouped.values():
        events.sort(key=lambda e: e.time_label)
    return grouped


def filter_by_week(records: Iterable[ScheduleRecord], week: IsoWeek) -> List[ScheduleRecord]:
    out: List[ScheduleRecord] = []
    for record in records:
        start = record_start(record)
        if start is not None and isoweek.iso_week_of(start) == week:
            out.append(record)
    return out


def sorted_unique_weeks(weeks: Iterable[IsoWeek]) -> List[IsoWeek]:
    merged: Dict[str, IsoWeek] = {}
    for week in weeks:
        merged[isoweek.key(week)] = week
    return sorted(merged.values())


def available_weeks(
    records: Iterable[ScheduleRecord],
    extra_weeks: Iterable[IsoWeek] = (),
    now: Optional[datetime] = None,
) -> List[IsoWeek]:
    weeks = [isoweek.current_iso_week(now)]
    for record in records:
        start = record_start(record)
        if start is not None:
            weeks.append(isoweek.iso_week_of(start))
    weeks.extend(extra_weeks)
    return sorted_unique_weeks(weeks)


def weekly_plan(
    records: Iterable[ScheduleRecord],
    week: IsoWeek,
    performers: Optional[Lookup] = None,
    types: Optional[Lookup] = None,
) -> WeeklyGrouping:
    return group_by_day(filter_by_week(records, week), performers, types)
