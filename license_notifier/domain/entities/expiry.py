"""Domain entities produced while scanning serials for expiry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .license import LicenseSerial


class ExpiryStatus(str, Enum):
    """Classification of a serial relative to the reference day."""

    IGNORE = "ignore"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


@dataclass
class ExpiryFinding:
    """A classified serial together with its distance to the end date."""

    serial: LicenseSerial
    status: ExpiryStatus
    days_until: int | None = None
    # Whole days since the end date, rounded up; zero unless expired.
    days_overdue: int = 0

    @property
    def is_expired(self) -> bool:
        return self.status is ExpiryStatus.EXPIRED


@dataclass
class ReminderRunSummary:
    """Counters describing the outcome of one reminder run."""

    today: datetime
    serials_scanned: int = 0
    expired_count: int = 0
    expiring_soon_count: int = 0
    skipped_count: int = 0
    notifications_created: int = 0
    duplicates_skipped: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    emails_skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class EmailRetrySummary:
    """Counters describing a pass over notifications whose email failed."""

    today: datetime
    attempted: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    errors: list[str] = field(default_factory=list)


__all__ = ["ExpiryStatus", "ExpiryFinding", "ReminderRunSummary", "EmailRetrySummary"]
