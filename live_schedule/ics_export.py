"""ICS export of a weekly plan."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import List, Mapping, Optional

from . import isoweek
from .grouping import WeeklyGrouping
from .isoweek import IsoWeek
from .models import ScheduleEvent, TagKey, TagMeta
from .records import parse_start_time


def _format(dt: datetime) -> str:
    """Format a local datetime in UTC with trailing Z."""
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


_TEXT_ESCAPES = {"\\": "\\\\", "\n": "\\n", ",": "\\,", ";": "\\;"}


def _escape_text(value: str) -> str:
    """Escape a TEXT property value (RFC 5545, 3.3.11)."""
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    return "".join(_TEXT_ESCAPES.get(ch, ch) for ch in value)


def _fold_line(line: str, limit: int = 75) -> List[str]:
    """Split ``line`` into content lines of at most ``limit`` octets."""
    parts: List[str] = []
    start = 0
    size = 0
    budget = limit
    for index, ch in enumerate(line):
        width = len(ch.encode("utf-8"))
        if size + width > budget:
            parts.append(line[start:index])
            start = index
            size = 0
            # continuation lines lose one octet to the leading space
            budget = limit - 1
        size += width
    parts.append(line[start:])
    return parts[:1] + [" " + part for part in parts[1:]]


def _labels(event: ScheduleEvent, meta: Optional[Mapping[TagKey, TagMeta]]) -> List[str]:
    if meta is None:
        return [event.performer_name, *event.guest_names, event.type_name]
    return [meta[tag].label for tag in event.tag_keys]


def event_uid(event: ScheduleEvent) -> str:
    base = f"{event.performer_id}|{event.type_id}|{event.start_time}|{event.title}"
    return hashlib.sha1(base.encode("utf-8")).hexdigest()


def build_ics(
    plan: WeeklyGrouping,
    week: IsoWeek,
    *,
    meta: Optional[Mapping[TagKey, TagMeta]] = None,
) -> str:
    now = datetime.now()
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Live Schedule//EN",
        f"X-WR-CALNAME:{_escape_text('Live schedule ' + isoweek.format_label(week))}",
    ]
    for events in plan.values():
        for e in events:
            labels = _labels(e, meta)
            lines.append("BEGIN:VEVENT")
            lines.append(f"UID:{event_uid(e)}")
            lines.append(f"DTSTAMP:{_format(now)}")
            lines.append(f"SUMMARY:{_escape_text(e.title or e.performer_name)}")
            lines.append(f"DTSTART:{_format(e.start)}")
            end = parse_start_time(e.end_time)
            if end is not None and end > e.start:
                lines.append(f"DTEND:{_format(end)}")
            description = " / ".join(filter(None, labels))
            if description:
                lines.append(f"DESCRIPTION:{_escape_text(description)}")
                lines.append("CATEGORIES:" + ",".join(_escape_text(x) for x in labels if x))
            lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")

    folded: List[str] = []
    for line in lines:
        folded.extend(_fold_line(line))
    return "\r\n".join(folded) + "\r\n"


def output_filename(week: IsoWeek) -> str:
    return f"live_schedule_{isoweek.key(week)}.ics"
