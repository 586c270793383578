"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

NOTIFICATION_TYPE_EXPIRY = "expiry"

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"

EMAIL_STATUS_PENDING = "pending"
EMAIL_STATUS_SENT = "sent"
EMAIL_STATUS_FAILED = "failed"
EMAIL_STATUS_SKIPPED = "skipped"


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: int | None
    type: str
    title: str
    message: str
    user_id: str
    license_id: str | None = None
    serial_id: str | None = None
    is_read: bool = False
    priority: str = PRIORITY_MEDIUM
    action_required: bool = False
    action_url: str | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    email_status: str = EMAIL_STATUS_PENDING


__all__ = [
    "Notification",
    "NOTIFICATION_TYPE_EXPIRY",
    "PRIORITY_HIGH",
    "PRIORITY_MEDIUM",
    "EMAIL_STATUS_PENDING",
    "EMAIL_STATUS_SENT",
    "EMAIL_STATUS_FAILED",
    "EMAIL_STATUS_SKIPPED",
]
