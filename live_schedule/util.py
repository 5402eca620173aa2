"""Utility helpers."""

from __future__ import annotations

import logging
from datetime import datetime


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def now() -> datetime:
    return datetime.now()
