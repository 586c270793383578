"""Persist expiry notifications and hand their emails to the mail gateway."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from sqlalchemy.orm import Session

from license_notifier.domain.entities import (
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_SENT,
    EMAIL_STATUS_SKIPPED,
    NOTIFICATION_TYPE_EXPIRY,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    EmailDispatchRequest,
    ExpiryFinding,
    Notification,
    UserProfile,
)
from license_notifier.infrastructure.email import build_expiry_email
from license_notifier.infrastructure.repositories import (
    DuplicateNotificationError,
    NotificationRepository,
)
from license_notifier.utils import now_in_utc

from .dedup import notification_sent_today

logger = logging.getLogger(__name__)

MailSender = Callable[[EmailDispatchRequest], bool]

TITLE_EXPIRED = "Serial License Expired"
TITLE_EXPIRING_SOON = "Serial License Expiring Soon"
DEFAULT_URGENT_THRESHOLD_DAYS = 7


class DispatchOutcome(str, Enum):
    """Final state of one (serial, user) unit of work."""

    DEDUPED = "deduped"
    EMAIL_SENT = "email_sent"
    EMAIL_FAILED = "email_failed"
    EMAIL_SKIPPED = "email_skipped"


def is_urgent(
    finding: ExpiryFinding, *, threshold_days: int = DEFAULT_URGENT_THRESHOLD_DAYS
) -> bool:
    """Expired serials and those ending within ``threshold_days`` are urgent."""

    if finding.is_expired:
        return True
    return finding.days_until is not None and finding.days_until <= threshold_days


def expiry_message(finding: ExpiryFinding) -> str:
    serial = finding.serial
    subject = f"{serial.serial_or_contract} for {serial.item_description}"
    if finding.is_expired:
        return f"{subject} expired {finding.days_overdue} day(s) ago"
    return f"{subject} expires in {finding.days_until} day(s)"


def action_url_for(license_id: str, serial_id: str) -> str:
    return f"/licenses/{license_id}?serial={serial_id}"


def build_expiry_notification(
    finding: ExpiryFinding,
    *,
    user_id: str,
    created_at: datetime | None = None,
    urgent_threshold_days: int = DEFAULT_URGENT_THRESHOLD_DAYS,
) -> Notification:
    """Return the unsaved notification announcing ``finding`` to ``user_id``."""

    serial = finding.serial
    urgent = is_urgent(finding, threshold_days=urgent_threshold_days)
    return Notification(
        id=None,
        type=NOTIFICATION_TYPE_EXPIRY,
        title=TITLE_EXPIRED if finding.is_expired else TITLE_EXPIRING_SOON,
        message=expiry_message(finding),
        user_id=user_id,
        license_id=serial.license_id,
        serial_id=serial.id,
        is_read=False,
        priority=PRIORITY_HIGH if urgent else PRIORITY_MEDIUM,
        action_required=True,
        action_url=action_url_for(serial.license_id, serial.id),
        created_at=created_at or now_in_utc(),
        expires_at=None,
    )


def deliver(request: EmailDispatchRequest, mail_sender: MailSender) -> bool:
    """Send ``request`` and report success; gateway errors are logged, not raised."""

    try:
        delivered = bool(mail_sender(request))
    except Exception:
        logger.exception("Mail gateway raised while sending to %s", request.to)
        return False
    if not delivered:
        logger.error("Mail gateway rejected email to %s (%s)", request.to, request.subject)
    return delivered


def dispatch_expiry_notification(
    session: Session,
    finding: ExpiryFinding,
    *,
    user_id: str,
    profile: UserProfile | None,
    today: datetime,
    mail_sender: MailSender,
    urgent_threshold_days: int = DEFAULT_URGENT_THRESHOLD_DAYS,
) -> DispatchOutcome:
    """Run one (serial, user) unit: dedup, persist, then email.

    Store errors propagate so the caller can roll back and move on to the
    next unit. Email failures are absorbed and recorded on the notification.
    """

    serial = finding.serial
    if notification_sent_today(
        session,
        user_id=user_id,
        license_id=serial.license_id,
        serial_id=serial.id,
        today=today,
    ):
        logger.debug(
            "Notification already sent today to %s for %s", user_id, serial.serial_or_contract
        )
        return DispatchOutcome.DEDUPED

    notification = build_expiry_notification(
        finding, user_id=user_id, urgent_threshold_days=urgent_threshold_days
    )
    repository = NotificationRepository(session)
    try:
        saved = repository.create(notification)
    except DuplicateNotificationError:
        logger.info(
            "Concurrent run already notified %s for %s; skipping email",
            user_id,
            serial.serial_or_contract,
        )
        return DispatchOutcome.DEDUPED

    if profile is None or not profile.email:
        logger.warning(
            "User %s has no email address; notification %s stored without email",
            user_id,
            saved.id,
        )
        repository.update_email_status(saved.id, EMAIL_STATUS_SKIPPED)
        return DispatchOutcome.EMAIL_SKIPPED

    request = build_expiry_email(
        recipient=profile.email,
        serial_label=serial.serial_or_contract,
        message=saved.message,
        expired=finding.is_expired,
        urgent=saved.priority == PRIORITY_HIGH,
        action_url=saved.action_url,
    )
    if deliver(request, mail_sender):
        repository.update_email_status(saved.id, EMAIL_STATUS_SENT)
        logger.info(
            "Sent %s notification to %s for %s",
            finding.status.value,
            profile.email,
            serial.serial_or_contract,
        )
        return DispatchOutcome.EMAIL_SENT

    repository.update_email_status(saved.id, EMAIL_STATUS_FAILED)
    return DispatchOutcome.EMAIL_FAILED


__all__ = [
    "DispatchOutcome",
    "MailSender",
    "TITLE_EXPIRED",
    "TITLE_EXPIRING_SOON",
    "action_url_for",
    "build_expiry_notification",
    "deliver",
    "dispatch_expiry_notification",
    "expiry_message",
    "is_urgent",
]
