"""Projection of raw schedule records into display events."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Mapping, Optional

from .models import ScheduleEvent, ScheduleRecord, TagKey

Lookup = Mapping[int, str]

# "26-01-28 19:30", the short format older payloads used
_LEGACY_FORMAT = "%y-%m-%d %H:%M"


def parse_start_time(value: object) -> Optional[datetime]:
    """Parse a record timestamp into a naive local datetime.

    Returns ``None`` for anything that cannot be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.strptime(raw, _LEGACY_FORMAT)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone().replace(tzinfo=None)
        except (OverflowError, ValueError):
            return None
    return parsed


def record_start(record: ScheduleRecord) -> Optional[datetime]:
    return parse_start_time(record.start_time)


def format_time_label(dt: datetime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


def resolve_name(lookup: Optional[Lookup], ident: int) -> str:
    name = lookup.get(ident) if lookup else None
    return name if name else f"id:{ident}"


def record_tag_keys(record: ScheduleRecord) -> List[TagKey]:
    """Host tag, then each distinct guest tag, then the type tag."""
    keys: List[TagKey] = []
    for mid in [record.mid, *record.guest_mids]:
        tag = TagKey.for_member(mid)
        if tag not in keys:
            keys.append(tag)
    keys.append(TagKey.for_type(record.live_type))
    return keys


def to_schedule_event(
    record: ScheduleRecord,
    performers: Optional[Lookup] = None,
    types: Optional[Lookup] = None,
) -> Optional[ScheduleEvent]:
    start = record_start(record)
    if start is None:
        logging.debug("Dropping record %s: bad start_time %r", record.id, record.start_time)
        return None

    tag_keys = record_tag_keys(record)
    guest_ids = tuple(t.id for t in tag_keys if t.kind == "member" and t.id != record.mid)
    return ScheduleEvent(
        time_label=format_time_label(start),
        title=record.title,
        tag_keys=tuple(tag_keys),
        performer_id=record.mid,
        guest_ids=tuple(record.guest_mids),
        type_id=record.live_type,
        start_time=record.start_time,
        end_time=record.end_time or None,
        status=record.status,
        start=start,
        performer_name=resolve_name(performers, record.mid),
        guest_names=tuple(resolve_name(performers, g) for g in guest_ids),
        type_name=resolve_name(types, record.live_type),
    )
