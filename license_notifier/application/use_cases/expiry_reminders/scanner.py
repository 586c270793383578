"""Classify license serials as expired, expiring soon or not due yet."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from license_notifier.domain.entities import ExpiryFinding, ExpiryStatus, LicenseSerial
from license_notifier.utils import ensure_utc, parse_utc_datetime

logger = logging.getLogger(__name__)

DEFAULT_NOTIFY_BEFORE_DAYS = 30
_SECONDS_PER_DAY = 24 * 60 * 60


class InvalidSerialDataError(ValueError):
    """Raised when a serial row cannot be evaluated."""


@dataclass
class ScanResult:
    """Actionable findings plus the serials rejected as malformed."""

    findings: list[ExpiryFinding] = field(default_factory=list)
    invalid: list[LicenseSerial] = field(default_factory=list)


def _notify_days(serial: LicenseSerial, default: int) -> int:
    raw = serial.notify_before_days
    if raw is None:
        return default
    try:
        days = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidSerialDataError(
            f"notify_before_days {raw!r} is not an integer"
        ) from exc
    if days < 0:
        raise InvalidSerialDataError(f"notify_before_days {days} is negative")
    return days


def classify_serial(
    serial: LicenseSerial,
    today: datetime,
    *,
    default_notify_days: int = DEFAULT_NOTIFY_BEFORE_DAYS,
) -> ExpiryFinding:
    """Classify ``serial`` relative to ``today`` (the start of a UTC day).

    A serial whose end date equals ``today`` is still expiring soon; it only
    counts as expired once the end date is strictly before ``today``.
    """

    if serial.end_date is None:
        return ExpiryFinding(serial=serial, status=ExpiryStatus.IGNORE)

    try:
        end = parse_utc_datetime(serial.end_date)
    except ValueError as exc:
        raise InvalidSerialDataError(
            f"end_date {serial.end_date!r} is not a valid date"
        ) from exc

    reference = ensure_utc(today)
    notify_date = end - timedelta(days=_notify_days(serial, default_notify_days))
    days_until = math.ceil((end - reference).total_seconds() / _SECONDS_PER_DAY)

    days_overdue = 0
    if end < reference:
        status = ExpiryStatus.EXPIRED
        days_overdue = math.ceil((reference - end).total_seconds() / _SECONDS_PER_DAY)
    elif notify_date <= reference <= end:
        status = ExpiryStatus.EXPIRING_SOON
    else:
        status = ExpiryStatus.IGNORE
    return ExpiryFinding(
        serial=serial, status=status, days_until=days_until, days_overdue=days_overdue
    )


def scan_serials(
    serials: Iterable[LicenseSerial],
    today: datetime,
    *,
    default_notify_days: int = DEFAULT_NOTIFY_BEFORE_DAYS,
) -> ScanResult:
    """Return the expired and expiring-soon findings among ``serials``.

    Malformed rows are logged and collected in :attr:`ScanResult.invalid`; they
    never abort the scan.
    """

    result = ScanResult()
    for serial in serials:
        try:
            finding = classify_serial(
                serial, today, default_notify_days=default_notify_days
            )
        except InvalidSerialDataError as exc:
            logger.warning(
                "Skipping serial %s of license %s: %s",
                serial.id,
                serial.license_id,
                exc,
            )
            result.invalid.append(serial)
            continue
        if finding.status is not ExpiryStatus.IGNORE:
            result.findings.append(finding)
    return result


__all__ = [
    "DEFAULT_NOTIFY_BEFORE_DAYS",
    "InvalidSerialDataError",
    "ScanResult",
    "classify_serial",
    "scan_serials",
]
