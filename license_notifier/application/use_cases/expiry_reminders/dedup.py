"""Same-day duplicate detection for expiry notifications."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from license_notifier.domain.entities import NOTIFICATION_TYPE_EXPIRY
from license_notifier.infrastructure.repositories import NotificationRepository


def notification_sent_today(
    session: Session,
    *,
    user_id: str,
    license_id: str,
    serial_id: str,
    today: datetime,
) -> bool:
    """Return ``True`` when an expiry notification exists since ``today``.

    Always hits the store; results are not cached across users or runs. The
    unique key on ``notifications`` covers the window between this check and
    the insert.
    """

    return NotificationRepository(session).exists_since(
        notification_type=NOTIFICATION_TYPE_EXPIRY,
        user_id=user_id,
        license_id=license_id,
        serial_id=serial_id,
        since=today,
    )


__all__ = ["notification_sent_today"]
