"""Domain entities exposed by the application."""

from .email_dispatch import EmailDispatchRequest
from .expiry import EmailRetrySummary, ExpiryFinding, ExpiryStatus, ReminderRunSummary
from .license import LicenseSerial
from .notification import (
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_PENDING,
    EMAIL_STATUS_SENT,
    EMAIL_STATUS_SKIPPED,
    NOTIFICATION_TYPE_EXPIRY,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    Notification,
)
from .user_profile import UserProfile

__all__ = [
    "EmailDispatchRequest",
    "EmailRetrySummary",
    "ExpiryFinding",
    "ExpiryStatus",
    "ReminderRunSummary",
    "LicenseSerial",
    "Notification",
    "NOTIFICATION_TYPE_EXPIRY",
    "PRIORITY_HIGH",
    "PRIORITY_MEDIUM",
    "EMAIL_STATUS_PENDING",
    "EMAIL_STATUS_SENT",
    "EMAIL_STATUS_FAILED",
    "EMAIL_STATUS_SKIPPED",
    "UserProfile",
]
