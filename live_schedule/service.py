"""Schedule façade used by the CLI and other front-ends."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from . import util
from .api import ScheduleApi
from .cache import ResourceCache
from .grouping import WeeklyGrouping, sorted_unique_weeks, weekly_plan
from .isoweek import IsoWeek, current_iso_week
from .models import LiveTag, LiveTagMeta, Performer, PerformerMeta, TagKey
from .tag_meta import TagMetaTable, build_member_tag_meta, build_type_tag_meta

PERFORMERS = "performers"
PERFORMER_META = "performer_meta"
LIVE_TAGS = "live_tags"
LIVE_TAG_META = "live_tag_meta"
AVAILABLE_WEEKS = "available_weeks"


@dataclass(frozen=True)
class Metadata:
    performers: List[Performer]
    performer_meta: List[PerformerMeta]
    live_tags: List[LiveTag]
    live_tag_meta: List[LiveTagMeta]


class ScheduleService:
    def __init__(
        self,
        api: ScheduleApi,
        *,
        extra_weeks: Iterable[IsoWeek] = (),
        clock: Optional[Callable[[], datetime]] = None,
        cache: Optional[ResourceCache] = None,
    ) -> None:
        self.api = api
        self.extra_weeks = tuple(extra_weeks)
        self._clock = clock or util.now
        self._cache = cache or ResourceCache()

    def _loaders(self) -> Dict[str, Callable[[], list]]:
        return {
            PERFORMERS: self.api.get_performers,
            PERFORMER_META: self.api.get_performer_meta,
            LIVE_TAGS: self.api.get_live_tags,
            LIVE_TAG_META: self.api.get_live_tag_meta,
        }

    def load_metadata(self) -> Metadata:
        """Fetch the four metadata collections in parallel and wait for all."""
        loaders = self._loaders()
        with ThreadPoolExecutor(max_workers=len(loaders)) as pool:
            futures = {
                name: pool.submit(self._cache.get, name, loader)
                for name, loader in loaders.items()
            }
        # the pool has joined; result() re-raises a failed fetch
        return Metadata(
            performers=futures[PERFORMERS].result(),
            performer_meta=futures[PERFORMER_META].result(),
            live_tags=futures[LIVE_TAGS].result(),
            live_tag_meta=futures[LIVE_TAG_META].result(),
        )

    def current_week(self) -> IsoWeek:
        return current_iso_week(self._clock())

    def get_available_weeks(self) -> List[IsoWeek]:
        def load() -> List[IsoWeek]:
            weeks = list(self.api.get_available_weeks())
            return sorted_unique_weeks([self.current_week(), *weeks, *self.extra_weeks])

        return list(self._cache.get(AVAILABLE_WEEKS, load))

    def get_weekly_plan(self, week: IsoWeek) -> WeeklyGrouping:
        meta = self.load_metadata()
        performers = {p.mid: p.name for p in meta.performers}
        _, _, types = build_type_tag_meta(meta.live_tags, meta.live_tag_meta)
        records = self.api.get_records_for_week(week)
        logging.info("Fetched %d records for %d-W%02d", len(records), week.year, week.week)
        return weekly_plan(records, week, performers, types)

    def get_tag_meta(self) -> TagMetaTable:
        meta = self.load_metadata()
        _, members = build_member_tag_meta(meta.performers, meta.performer_meta)
        _, types, _ = build_type_tag_meta(meta.live_tags, meta.live_tag_meta)
        return TagMetaTable({**members, **types})

    def get_member_tags(self) -> List[TagKey]:
        meta = self.load_metadata()
        tags, _ = build_member_tag_meta(meta.performers, meta.performer_meta)
        return tags

    def get_type_tags(self) -> List[TagKey]:
        meta = self.load_metadata()
        tags, _, _ = build_type_tag_meta(meta.live_tags, meta.live_tag_meta)
        return tags

    def reload(self, name: Optional[str] = None) -> None:
        self._cache.reload(name)
