"""API clients for the live schedule backend."""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

import requests

from . import util
from .config import DEFAULT_BASE_URL, DEFAULT_DATA_DIR, Settings
from .grouping import available_weeks, filter_by_week, sorted_unique_weeks
from .isoweek import IsoWeek
from .models import (
    LiveTag,
    LiveTagMeta,
    Performer,
    PerformerMeta,
    ScheduleRecord,
    from_dicts,
)

PERFORMERS = "/api/v1/vup"
PERFORMER_META = "/api/v1/vup_meta"
LIVE_TAGS = "/api/v1/live_tag"
LIVE_TAG_META = "/api/v1/live_tag_meta"
AVAILABLE_WEEKS = "/api/v1/live_records/available_weeks"
LIVE_RECORDS = "/api/v1/live_records"


class FetchError(RuntimeError):
    """A resource could not be fetched or decoded."""


def records_endpoint(week: IsoWeek) -> str:
    return f"{LIVE_RECORDS}/all/{week.year}/{week.week}"


def json_filename(endpoint: str) -> str:
    return endpoint.strip("/").replace("/", "_") + ".json"


def parse_weeks(data: Any) -> List[IsoWeek]:
    weeks: List[IsoWeek] = []
    for raw in data or []:
        try:
            weeks.append(IsoWeek(int(raw["year"]), int(raw["week"])))
        except (KeyError, TypeError, ValueError):
            logging.warning("Skipping malformed week entry: %r", raw)
    return weeks


class ScheduleApi(ABC):
    """Read-only access to the schedule resources."""

    @abstractmethod
    def _get(self, endpoint: str) -> Any:
        ...

    def _get_list(self, endpoint: str) -> List[Any]:
        data = self._get(endpoint)
        if data is None:
            return []
        if not isinstance(data, list):
            raise FetchError(f"Unexpected payload for {endpoint}: {type(data).__name__}")
        return data

    def get_performers(self) -> List[Performer]:
        return from_dicts(Performer, self._get_list(PERFORMERS))

    def get_performer_meta(self) -> List[PerformerMeta]:
        return from_dicts(PerformerMeta, self._get_list(PERFORMER_META))

    def get_live_tags(self) -> List[LiveTag]:
        return from_dicts(LiveTag, self._get_list(LIVE_TAGS))

    def get_live_tag_meta(self) -> List[LiveTagMeta]:
        return from_dicts(LiveTagMeta, self._get_list(LIVE_TAG_META))

    @abstractmethod
    def get_available_weeks(self) -> List[IsoWeek]:
        ...

    @abstractmethod
    def get_records_for_week(self, week: IsoWeek) -> List[ScheduleRecord]:
        ...


class HttpScheduleApi(ScheduleApi):
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        retries: int = 4,
        backoff_seconds: float = 1.0,
        dump_json: bool = False,
        json_dir: Path = DEFAULT_DATA_DIR,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self.timeout = timeout
        self.retries = max(1, retries)
        self.backoff_seconds = backoff_seconds
        self.dump_json = dump_json
        self.json_dir = Path(json_dir)
        if dump_json:
            self.json_dir.mkdir(parents=True, exist_ok=True)

    def _backoff(self, attempt: int) -> None:
        if attempt + 1 < self.retries and self.backoff_seconds > 0:
            time.sleep(self.backoff_seconds * 2**attempt)

    def _get(self, endpoint: str) -> Any:
        url = self.base_url + endpoint
        for attempt in range(self.retries):
            logging.info("GET %s", url)
            try:
                resp = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as exc:
                logging.warning("Request error: %s", exc)
                self._backoff(attempt)
                continue
            if resp.status_code >= 500:
                logging.warning("Server error %s for %s", resp.status_code, endpoint)
                self._backoff(attempt)
                continue
            if resp.status_code >= 400:
                raise FetchError(f"Failed to fetch {endpoint}: HTTP {resp.status_code}")
            try:
                data = resp.json()
            except ValueError as exc:
                raise FetchError(f"Invalid JSON from {endpoint}") from exc
            if self.dump_json:
                with (self.json_dir / json_filename(endpoint)).open("w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
            return data
        raise FetchError(f"Failed to fetch {endpoint}")

    def get_available_weeks(self) -> List[IsoWeek]:
        return sorted_unique_weeks(parse_weeks(self._get_list(AVAILABLE_WEEKS)))

    def get_records_for_week(self, week: IsoWeek) -> List[ScheduleRecord]:
        return from_dicts(ScheduleRecord, self._get_list(records_endpoint(week)))


class OfflineScheduleApi(ScheduleApi):
    """Serves saved JSON payloads from a directory.

    Records come from ``api_v1_live_records.json`` plus any per-week dumps
    written by :class:`HttpScheduleApi`; weeks are derived from them.
    """

    def __init__(
        self,
        json_dir: Path = DEFAULT_DATA_DIR,
        *,
        extra_weeks: Iterable[IsoWeek] = (),
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.json_dir = Path(json_dir)
        self.extra_weeks = tuple(extra_weeks)
        self._clock = clock or util.now

    def _load(self, path: Path) -> Any:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as exc:
            raise FetchError(f"Invalid JSON in {path}") from exc

    def _get(self, endpoint: str) -> Any:
        path = self.json_dir / json_filename(endpoint)
        if not path.exists():
            logging.info("No saved payload at %s", path)
            return []
        return self._load(path)

    def _all_records(self) -> List[ScheduleRecord]:
        raw = list(self._get_list(LIVE_RECORDS))
        for path in sorted(self.json_dir.glob(json_filename(LIVE_RECORDS + "/all/*"))):
            data = self._load(path)
            if isinstance(data, list):
                raw.extend(data)

        seen = set()
        unique = []
        for item in raw:
            ident = item.get("id") if isinstance(item, dict) else None
            if ident is not None:
                if ident in seen:
                    continue
                seen.add(ident)
            unique.append(item)
        return from_dicts(ScheduleRecord, unique)

    def get_available_weeks(self) -> List[IsoWeek]:
        return available_weeks(self._all_records(), self.extra_weeks, self._clock())

    def get_records_for_week(self, week: IsoWeek) -> List[ScheduleRecord]:
        return filter_by_week(self._all_records(), week)


def create_api(settings: Settings) -> ScheduleApi:
    if settings.backend == "offline":
        return OfflineScheduleApi(settings.data_dir, extra_weeks=settings.extra_weeks)
    return HttpScheduleApi(
        settings.base_url,
        timeout=settings.timeout_seconds,
        dump_json=settings.dump_json,
        json_dir=settings.data_dir,
    )
