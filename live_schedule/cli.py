"""Command line interface for the live schedule."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List

from . import api, config, ics_export, isoweek, util
from .grouping import WeeklyGrouping
from .service import ScheduleService
from .tag_meta import TagMetaTable


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Weekly livestream schedule")
    parser.add_argument("--backend", choices=config.BACKENDS)
    parser.add_argument("--base-url")
    parser.add_argument("--data-dir", type=Path, help="Directory of saved JSON payloads")
    parser.add_argument("--week", help="ISO week as YYYY-WW (default: current week)")
    parser.add_argument(
        "--extra-week",
        action="append",
        default=[],
        help="Additional week to list, may be repeated",
    )
    nav = parser.add_mutually_exclusive_group()
    nav.add_argument("--prev", action="store_true", help="Show the week before --week")
    nav.add_argument("--next", action="store_true", help="Show the week after --week")
    parser.add_argument("--list-weeks", action="store_true", help="List available weeks")
    parser.add_argument("--ics", action="store_true", help="Write the week as an .ics file")
    parser.add_argument("--out-dir", type=Path, default=Path("out/ics"))
    parser.add_argument("--dump-json", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> config.Settings:
    settings = config.load_settings()
    overrides = {}
    if args.backend:
        overrides["backend"] = args.backend
    if args.base_url:
        overrides["base_url"] = args.base_url.rstrip("/")
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.extra_week:
        overrides["extra_weeks"] = settings.extra_weeks + tuple(
            isoweek.parse_key(w) for w in args.extra_week
        )
    if args.dump_json:
        overrides["dump_json"] = True
    return dataclasses.replace(settings, **overrides)


def print_plan(plan: WeeklyGrouping, week: isoweek.IsoWeek, meta: TagMetaTable) -> None:
    print(f"{isoweek.format_label(week)} ({isoweek.week_range_label(week)})")
    for day, events in plan.items():
        print(day)
        if not events:
            print("  -")
        for e in events:
            tags = ", ".join(meta[t].label for t in e.tag_keys)
            print(f"  {e.time_label} {e.title} [{tags}]")


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    util.configure_logging(args.verbose)
    try:
        settings = build_settings(args)
        service = ScheduleService(api.create_api(settings), extra_weeks=settings.extra_weeks)
        if args.list_weeks:
            for week in service.get_available_weeks():
                print(f"{isoweek.key(week)}  {isoweek.week_range_label(week)}")
            return 0

        week = isoweek.parse_key(args.week) if args.week else service.current_week()
        if args.prev:
            week = isoweek.previous_week(week)
        elif args.next:
            week = isoweek.next_week(week)
        plan = service.get_weekly_plan(week)
        meta = service.get_tag_meta()
        if args.ics:
            args.out_dir.mkdir(parents=True, exist_ok=True)
            path = args.out_dir / ics_export.output_filename(week)
            path.write_text(ics_export.build_ics(plan, week, meta=meta), encoding="utf-8")
            print(f"Wrote {path}")
        else:
            print_plan(plan, week, meta)
    except (api.FetchError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
