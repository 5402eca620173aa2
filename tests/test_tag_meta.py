import pytest

from live_schedule import models, tag_meta
from live_schedule.models import TagKey


@pytest.mark.parametrize(
    "value, expected",
    [
        ("#ABC", "#abc"),
        (" #FF6B6B ", "#ff6b6b"),
        ("red", None),
        ("#12345", None),
        ("#ggg", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_hex(value, expected):
    assert tag_meta.normalize_hex(value) == expected


def test_make_tint_blends_toward_white():
    assert tag_meta.make_tint("#ff0000", "#ffffff") == "#ffd1d1"
    assert tag_meta.make_tint("#000", "#ffffff") == "#d1d1d1"
    assert tag_meta.make_tint("#ffffff", "#000000") == "#ffffff"
    assert tag_meta.make_tint("nope", "#abcdef") == "#abcdef"


def test_member_meta_sorted_by_id_and_cycles_palette():
    performers = [models.Performer(mid=m, name=f"p{m}") for m in (9, 3, 1, 2, 4, 5, 6, 7, 8)]
    tags, meta = tag_meta.build_member_tag_meta(performers)
    assert [t.id for t in tags] == [1, 2, 3, 4, 5, 6, 7, 8, 9]
    assert (meta[TagKey("member", 1)].color, meta[TagKey("member", 1)].tint) == tag_meta.MEMBER_PALETTE[0]
    assert meta[TagKey("member", 9)].color == tag_meta.MEMBER_PALETTE[0][0]
    assert meta[TagKey("member", 2)].color == tag_meta.MEMBER_PALETTE[1][0]


def test_member_meta_is_independent_of_input_order():
    performers = [models.Performer(mid=m, name=f"p{m}") for m in (4, 2, 8)]
    first = tag_meta.build_member_tag_meta(performers)
    second = tag_meta.build_member_tag_meta(list(reversed(performers)))
    assert first == second


def test_member_override_color_and_avatar():
    performers = [
        models.Performer(mid=1, name="Alice", face_url_bili="https://img/alice.png"),
        models.Performer(mid=2, name="Bella"),
    ]
    overrides = [models.PerformerMeta(mid=2, color="#000000"), models.PerformerMeta(mid=1, color="bad")]
    _, meta = tag_meta.build_member_tag_meta(performers, overrides)
    alice = meta[TagKey("member", 1)]
    bella = meta[TagKey("member", 2)]
    assert alice.label == "Alice"
    assert alice.avatar == "https://img/alice.png"
    assert alice.color == tag_meta.MEMBER_PALETTE[0][0]
    assert (bella.color, bella.tint) == ("#000000", "#d1d1d1")
    assert bella.kind == "member"


def test_type_meta_order_activity_and_icons():
    live_tags = [
        models.LiveTag(tag_id=5, name="Show", sort_order=1),
        models.LiveTag(tag_id=2, name="2D", sort_order=1),
        models.LiveTag(tag_id=9, name="Daily"),
        models.LiveTag(tag_id=7, name="Gone", sort_order=0, is_active=False),
    ]
    extras = [models.LiveTagMeta(tag_id=2, color="#F00", icon="🎨")]
    tags, meta, names = tag_meta.build_type_tag_meta(live_tags, extras)
    assert tags == [TagKey("type", 9), TagKey("type", 2), TagKey("type", 5)]
    assert names == {9: "Daily", 2: "2D", 5: "Show"}
    assert meta[TagKey("type", 2)].color == "#f00"
    assert meta[TagKey("type", 2)].tint == "#ffd1d1"
    assert meta[TagKey("type", 2)].icon == "🎨"
    assert meta[TagKey("type", 9)].color == tag_meta.TYPE_PALETTE[0][0]
    assert meta[TagKey("type", 5)].icon is None
    assert TagKey("type", 7) not in meta


def test_table_falls_back_for_unknown_tags():
    table = tag_meta.TagMetaTable({})
    entry = table[TagKey("member", 42)]
    assert entry.label == "member:42"
    assert entry.color == tag_meta.FALLBACK_COLOR
    assert entry.tint == tag_meta.FALLBACK_TINT
    assert TagKey("member", 42) not in table
    assert table.get(TagKey("member", 42)) is None
    assert len(table) == 0


def test_fallback_for_plain_label():
    assert tag_meta.fallback_tag_meta("Unknown tag").label == "Unknown tag"
