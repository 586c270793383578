"""Helpers for working with UTC datetimes and calendar days."""

from __future__ import annotations

from datetime import date, datetime, time, timezone


def now_in_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def utc_day_start(value: datetime | None = None) -> datetime:
    """Return midnight UTC of the day containing ``value`` (defaults to now).

    Naive values are interpreted as UTC. The result is always timezone aware so
    it can be compared with any normalized end date.
    """

    moment = ensure_utc(value) if value is not None else now_in_utc()
    return datetime.combine(moment.date(), time.min, tzinfo=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in UTC."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_utc_naive(value: datetime | None) -> datetime | None:
    """Return ``value`` converted to UTC but without ``tzinfo``.

    Plain ``DATETIME`` columns do not keep offsets, so the store holds naive UTC
    values while the domain layer works with aware datetimes.
    """

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.replace(tzinfo=None)


def parse_utc_datetime(value: date | datetime | str) -> datetime:
    """Coerce a date, datetime or ISO-8601 string into an aware UTC datetime.

    Raises :class:`ValueError` when ``value`` cannot be interpreted.
    """

    if isinstance(value, datetime):
        return ensure_utc(value)  # type: ignore[return-value]
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty date string")
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        return ensure_utc(datetime.fromisoformat(text))  # type: ignore[return-value]
    raise ValueError(f"unsupported date value {value!r}")
