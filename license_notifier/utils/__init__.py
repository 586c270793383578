"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_utc,
    ensure_utc_naive,
    now_in_utc,
    parse_utc_datetime,
    utc_day_start,
)

__all__ = [
    "ensure_utc",
    "ensure_utc_naive",
    "now_in_utc",
    "parse_utc_datetime",
    "utc_day_start",
]
