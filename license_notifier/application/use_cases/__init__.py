"""Aggregate application use cases."""

from .expiry_reminders import retry_failed_expiry_emails, send_expiry_reminders

__all__ = [
    "retry_failed_expiry_emails",
    "send_expiry_reminders",
]
