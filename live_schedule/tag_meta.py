"""Tag colors, tints and icons derived from performer and tag lists."""

from __future__ import annotations

import math
import string
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .models import LiveTag, LiveTagMeta, Performer, PerformerMeta, TagKey, TagMeta

MEMBER_PALETTE = [
    ("#ff6b6b", "#ffe5e5"),
    ("#4d96ff", "#e2eeff"),
    ("#06d6a0", "#dffaf0"),
    ("#ffd166", "#fff2b3"),
    ("#ff4fa3", "#ffe0f0"),
    ("#9ee65c", "#effbe3"),
    ("#845ef7", "#eee6ff"),
    ("#f59e0b", "#ffedd5"),
]

TYPE_PALETTE = [
    ("#ff8a5b", "#ffe5d8"),
    ("#4cc9f0", "#e0f7ff"),
    ("#f15bb5", "#ffe0f0"),
    ("#43aa8b", "#dcf5ee"),
    ("#f9c74f", "#fff3cf"),
    ("#9b5de5", "#efe4ff"),
]

FALLBACK_COLOR = "#5a4d43"
FALLBACK_TINT = "#f0e9e2"
TINT_MIX = 0.82


def normalize_hex(color: Optional[str]) -> Optional[str]:
    """Return ``#rgb``/``#rrggbb`` lowercased, or ``None`` if not a hex color."""
    if not color:
        return None
    value = color.strip().lower()
    if not value.startswith("#") or len(value) not in (4, 7):
        return None
    if any(ch not in string.hexdigits for ch in value[1:]):
        return None
    return value


def _hex_to_rgb(color: str) -> Optional[Tuple[int, int, int]]:
    value = normalize_hex(color)
    if value is None:
        return None
    raw = value[1:]
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16)


def make_tint(color: str, fallback: str) -> str:
    """Blend ``color`` toward white by :data:`TINT_MIX`."""
    rgb = _hex_to_rgb(color)
    if rgb is None:
        return fallback
    mixed = [math.floor(v + (255 - v) * TINT_MIX + 0.5) for v in rgb]
    return "#" + "".join(f"{v:02x}" for v in mixed)


def palette_entry(palette: List[Tuple[str, str]], index: int) -> Tuple[str, str]:
    return palette[index % len(palette)]


def _colors(palette: List[Tuple[str, str]], index: int, configured: Optional[str]) -> Tuple[str, str]:
    color, tint = palette_entry(palette, index)
    override = normalize_hex(configured)
    if override:
        return override, make_tint(override, tint)
    return color, tint


def build_member_tag_meta(
    performers: Iterable[Performer],
    performer_meta: Iterable[PerformerMeta] = (),
) -> Tuple[List[TagKey], Dict[TagKey, TagMeta]]:
    colors_by_mid = {m.mid: m.color for m in performer_meta}
    ordered = sorted(performers, key=lambda p: p.mid)

    tags: List[TagKey] = []
    meta: Dict[TagKey, TagMeta] = {}
    for index, performer in enumerate(ordered):
        color, tint = _colors(MEMBER_PALETTE, index, colors_by_mid.get(performer.mid))
        tag = TagKey.for_member(performer.mid)
        tags.append(tag)
        meta[tag] = TagMeta(
            id=performer.mid,
            kind="member",
            label=performer.name,
            color=color,
            tint=tint,
            avatar=performer.face_url_bili or None,
        )
    return tags, meta


def build_type_tag_meta(
    live_tags: Iterable[LiveTag],
    live_tag_meta: Iterable[LiveTagMeta] = (),
) -> Tuple[List[TagKey], Dict[TagKey, TagMeta], Dict[int, str]]:
    meta_by_id = {m.tag_id: m for m in live_tag_meta}
    active = [t for t in live_tags if t.is_active is not False]
    ordered = sorted(active, key=lambda t: (t.sort_order or 0, t.tag_id))

    tags: List[TagKey] = []
    meta: Dict[TagKey, TagMeta] = {}
    names: Dict[int, str] = {}
    for index, live_tag in enumerate(ordered):
        extra = meta_by_id.get(live_tag.tag_id)
        color, tint = _colors(TYPE_PALETTE, index, extra.color if extra else None)
        tag = TagKey.for_type(live_tag.tag_id)
        tags.append(tag)
        names[live_tag.tag_id] = live_tag.name
        meta[tag] = TagMeta(
            id=live_tag.tag_id,
            kind="type",
            label=live_tag.name,
            color=color,
            tint=tint,
            icon=(extra.icon or None) if extra else None,
        )
    return tags, meta, names


def fallback_tag_meta(tag: Union[TagKey, str]) -> TagMeta:
    return TagMeta(label=str(tag), color=FALLBACK_COLOR, tint=FALLBACK_TINT)


class TagMetaTable(Mapping[TagKey, TagMeta]):
    """Read-only tag metadata; unknown keys resolve to the fallback entry."""

    def __init__(self, entries: Mapping[TagKey, TagMeta]) -> None:
        self._entries = dict(entries)

    def __getitem__(self, tag: TagKey) -> TagMeta:
        entry = self._entries.get(tag)
        if entry is None:
            return fallback_tag_meta(tag)
        return entry

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, tag, default=None):  # type: ignore[override]
        return self._entries.get(tag, default)
