"""Expiry detection and notification dispatch for license serials."""

from .assignments import resolve_assigned_users
from .dedup import notification_sent_today
from .dispatcher import (
    DispatchOutcome,
    MailSender,
    build_expiry_notification,
    dispatch_expiry_notification,
)
from .retry import retry_failed_expiry_emails
from .run import send_expiry_reminders
from .scanner import InvalidSerialDataError, ScanResult, classify_serial, scan_serials

__all__ = [
    "DispatchOutcome",
    "InvalidSerialDataError",
    "MailSender",
    "ScanResult",
    "build_expiry_notification",
    "classify_serial",
    "dispatch_expiry_notification",
    "notification_sent_today",
    "resolve_assigned_users",
    "retry_failed_expiry_emails",
    "scan_serials",
    "send_expiry_reminders",
]
