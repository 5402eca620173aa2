"""Data models for schedule payloads and derived views."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Literal, Optional, Tuple, Type, TypeVar

TagKind = Literal["member", "type"]

T = TypeVar("T")


@dataclass
class Performer:
    mid: int
    name: str
    face_url_bili: Optional[str] = None

    def __post_init__(self) -> None:
        self.mid = int(self.mid)


@dataclass
class PerformerMeta:
    mid: int
    color: Optional[str] = None

    def __post_init__(self) -> None:
        self.mid = int(self.mid)


@dataclass
class LiveTag:
    tag_id: int
    name: str
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    def __post_init__(self) -> None:
        self.tag_id = int(self.tag_id)


@dataclass
class LiveTagMeta:
    tag_id: int
    color: Optional[str] = None
    icon: Optional[str] = None

    def __post_init__(self) -> None:
        self.tag_id = int(self.tag_id)


@dataclass
class ScheduleRecord:
    mid: int
    start_time: str
    id: Optional[int] = None
    guest_mids: List[int] = field(default_factory=list)
    live_type: int = 0
    title: str = ""
    end_time: Optional[str] = None
    status: int = 0

    def __post_init__(self) -> None:
        self.mid = int(self.mid)
        self.live_type = int(self.live_type) if self.live_type is not None else 0
        guests: List[int] = []
        for raw in self.guest_mids or []:
            try:
                guests.append(int(raw))
            except (TypeError, ValueError):
                logging.warning("Record %s: ignoring guest id %r", self.id, raw)
        self.guest_mids = guests
        self.title = self.title or ""


@dataclass(frozen=True)
class TagKey:
    kind: TagKind
    id: int

    @classmethod
    def for_member(cls, mid: int) -> "TagKey":
        return cls("member", int(mid))

    @classmethod
    def for_type(cls, type_id: int) -> "TagKey":
        return cls("type", int(type_id))

    @classmethod
    def parse(cls, text: str) -> "TagKey":
        kind, _, raw = text.partition(":")
        kind = "member" if kind == "member" else "type"
        try:
            ident = int(raw)
        except ValueError:
            ident = -1
        return cls(kind, ident)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"


@dataclass(frozen=True)
class ScheduleEvent:
    time_label: str
    title: str
    tag_keys: Tuple[TagKey, ...]
    performer_id: int
    guest_ids: Tuple[int, ...]
    type_id: int
    start_time: str
    end_time: Optional[str]
    status: int
    start: datetime
    performer_name: str = ""
    guest_names: Tuple[str, ...] = ()
    type_name: str = ""


@dataclass(frozen=True)
class TagMeta:
    label: str
    color: str
    tint: str
    id: Optional[int] = None
    kind: Optional[TagKind] = None
    avatar: Optional[str] = None
    icon: Optional[str] = None


def from_dict(cls: Type[T], data: dict) -> T:
    """Build ``cls`` from an API dict, ignoring keys it does not declare."""
    names = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    return cls(**{k: v for k, v in data.items() if k in names})


def from_dicts(cls: Type[T], items: Optional[Iterable[Any]]) -> List[T]:
    out: List[T] = []
    for raw in items or []:
        if not isinstance(raw, dict):
            logging.warning("Skipping non-object %s entry: %r", cls.__name__, raw)
            continue
        try:
            out.append(from_dict(cls, raw))
        except (TypeError, ValueError) as exc:
            logging.warning("Skipping malformed %s entry: %s", cls.__name__, exc)
    return out
