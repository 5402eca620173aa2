from datetime import datetime

import pytest

from live_schedule import models
from live_schedule.api import FetchError
from live_schedule.cache import ResourceCache
from live_schedule.isoweek import IsoWeek
from live_schedule.models import TagKey
from live_schedule.service import ScheduleService


class StubApi:
    def __init__(self):
        self.calls = {}
        self.fail_tags = False
        self.records = [
            models.ScheduleRecord(id=1, mid=2, guest_mids=[1, 2], live_type=3, title="Duet", start_time="2026-01-28T21:00"),
            models.ScheduleRecord(id=2, mid=1, live_type=8, title="Solo", start_time="2026-01-28T19:30"),
            models.ScheduleRecord(id=3, mid=1, live_type=3, title="Broken", start_time="??"),
        ]

    def _count(self, name):
        self.calls[name] = self.calls.get(name, 0) + 1

    def get_performers(self):
        self._count("performers")
        return [models.Performer(mid=2, name="Bella"), models.Performer(mid=1, name="Alice")]

    def get_performer_meta(self):
        self._count("performer_meta")
        return [models.PerformerMeta(mid=2, color="#123456")]

    def get_live_tags(self):
        self._count("live_tags")
        if self.fail_tags:
            raise FetchError("Failed to fetch /api/v1/live_tag")
        return [models.LiveTag(tag_id=3, name="Daily", sort_order=2), models.LiveTag(tag_id=1, name="2D", sort_order=1)]

    def get_live_tag_meta(self):
        self._count("live_tag_meta")
        return [models.LiveTagMeta(tag_id=3, icon="☕")]

    def get_available_weeks(self):
        self._count("available_weeks")
        return [IsoWeek(2026, 4), IsoWeek(2025, 52)]

    def get_records_for_week(self, week):
        self._count("records")
        return list(self.records)


def make_service(api=None, **kwargs):
    kwargs.setdefault("clock", lambda: datetime(2026, 1, 28, 12))
    return ScheduleService(api or StubApi(), **kwargs)


def test_weekly_plan():
    service = make_service()
    plan = service.get_weekly_plan(IsoWeek(2026, 5))
    assert len(plan) == 7
    wednesday = plan["Wednesday"]
    assert [e.title for e in wednesday] == ["Solo", "Duet"]
    duet = wednesday[1]
    assert duet.performer_name == "Bella"
    assert duet.guest_names == ("Alice",)
    assert duet.type_name == "Daily"
    assert duet.tag_keys == (TagKey("member", 2), TagKey("member", 1), TagKey("type", 3))
    assert wednesday[0].type_name == "id:8"


def test_weekly_plan_drops_records_outside_week():
    service = make_service()
    plan = service.get_weekly_plan(IsoWeek(2026, 6))
    assert not any(plan.values())


def test_metadata_is_fetched_once():
    api = StubApi()
    service = make_service(api)
    service.get_tag_meta()
    service.get_member_tags()
    service.get_type_tags()
    service.get_weekly_plan(IsoWeek(2026, 5))
    assert api.calls["performers"] == 1
    assert api.calls["live_tag_meta"] == 1

    service.reload()
    service.get_member_tags()
    assert api.calls["performers"] == 2


def test_tags_and_meta():
    service = make_service()
    assert service.get_member_tags() == [TagKey("member", 1), TagKey("member", 2)]
    assert service.get_type_tags() == [TagKey("type", 1), TagKey("type", 3)]

    meta = service.get_tag_meta()
    assert meta[TagKey("member", 2)].color == "#123456"
    assert meta[TagKey("type", 3)].icon == "☕"
    assert meta[TagKey("type", 99)].label == "type:99"


def test_failed_resource_does_not_affect_siblings():
    api = StubApi()
    api.fail_tags = True
    cache = ResourceCache()
    service = make_service(api, cache=cache)

    with pytest.raises(FetchError):
        service.get_type_tags()
    assert cache.status("live_tags") == "failed"
    assert cache.status("performers") == "ready"

    # the failure stays cached until reloaded
    with pytest.raises(FetchError):
        service.get_tag_meta()
    assert api.calls["live_tags"] == 1

    api.fail_tags = False
    service.reload("live_tags")
    assert service.get_type_tags() == [TagKey("type", 1), TagKey("type", 3)]
    assert api.calls["performers"] == 1


def test_available_weeks_include_current_and_extra():
    api = StubApi()
    service = make_service(api, extra_weeks=[IsoWeek(2025, 47), IsoWeek(2026, 4)])
    weeks = service.get_available_weeks()
    assert weeks == [IsoWeek(2025, 47), IsoWeek(2025, 52), IsoWeek(2026, 4), IsoWeek(2026, 5)]
    service.get_available_weeks()
    assert api.calls["available_weeks"] == 1
    assert service.current_week() == IsoWeek(2026, 5)
