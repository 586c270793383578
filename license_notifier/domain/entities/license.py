"""Domain entities representing license serials."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class LicenseSerial:
    """A single contract line under a license, with its own expiry date.

    ``end_date`` keeps whatever the store returned (``date``, ``datetime`` or an
    ISO string) so that malformed values can be reported instead of crashing the
    query that loaded them. ``item_description`` and ``project_assign`` are
    copied from the owning license.
    """

    id: str
    license_id: str
    serial_or_contract: str
    end_date: date | datetime | str | None
    start_date: date | datetime | str | None = None
    notify_before_days: int | None = None
    item_description: str = ""
    project_assign: str | None = None


__all__ = ["LicenseSerial"]
