"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Mapping, Optional, Tuple

from .isoweek import IsoWeek, parse_key

Backend = Literal["http", "offline"]
BACKENDS = ("http", "offline")

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_DATA_DIR = Path("out/json")


@dataclass(frozen=True)
class Settings:
    backend: Backend = "http"
    base_url: str = DEFAULT_BASE_URL
    data_dir: Path = DEFAULT_DATA_DIR
    extra_weeks: Tuple[IsoWeek, ...] = field(default_factory=tuple)
    timeout_seconds: float = 15.0
    dump_json: bool = False

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend {self.backend!r}, expected one of {', '.join(BACKENDS)}")


def parse_weeks(value: Optional[str]) -> Tuple[IsoWeek, ...]:
    if not value:
        return ()
    return tuple(parse_key(part) for part in value.split(",") if part.strip())


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        backend=env.get("LIVE_SCHEDULE_BACKEND", "http").strip().lower(),  # type: ignore[arg-type]
        base_url=env.get("LIVE_SCHEDULE_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        data_dir=Path(env.get("LIVE_SCHEDULE_DATA_DIR", str(DEFAULT_DATA_DIR))),
        extra_weeks=parse_weeks(env.get("LIVE_SCHEDULE_EXTRA_WEEKS")),
        timeout_seconds=float(env.get("LIVE_SCHEDULE_TIMEOUT", "15")),
    )
