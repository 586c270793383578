"""Re-send emails for today's expiry notifications that failed or never got a status."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_notifier.domain.entities import (
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_SENT,
    NOTIFICATION_TYPE_EXPIRY,
    PRIORITY_HIGH,
    EmailRetrySummary,
)
from license_notifier.infrastructure.email import build_expiry_email, get_mail_sender
from license_notifier.infrastructure.repositories import (
    LicenseSerialRepository,
    NotificationRepository,
    UserProfileRepository,
)
from license_notifier.utils import now_in_utc, utc_day_start

from .dispatcher import TITLE_EXPIRED, MailSender, deliver

logger = logging.getLogger(__name__)

# Rows still "pending" after this long belong to a unit whose status update
# was lost.
PENDING_GRACE_PERIOD = timedelta(minutes=15)


def retry_failed_expiry_emails(
    session: Session,
    *,
    today: datetime | None = None,
    mail_sender: MailSender | None = None,
) -> EmailRetrySummary:
    """Retry the emails of expiry notifications created since ``today``.

    Covers failed sends and notifications stuck in ``pending`` for longer
    than :data:`PENDING_GRACE_PERIOD`.
    """

    reference_day = utc_day_start(today)
    sender = mail_sender or get_mail_sender()
    summary = EmailRetrySummary(today=reference_day)

    notifications_repo = NotificationRepository(session)
    pending = notifications_repo.list_awaiting_email_retry(
        notification_type=NOTIFICATION_TYPE_EXPIRY,
        since=reference_day,
        pending_before=now_in_utc() - PENDING_GRACE_PERIOD,
    )
    if not pending:
        logger.info("No failed expiry emails to retry")
        return summary

    profiles = UserProfileRepository(session).get_map_by_ids(
        notification.user_id for notification in pending
    )
    serials_repo = LicenseSerialRepository(session)

    for notification in pending:
        profile = profiles.get(notification.user_id)
        if profile is None or not profile.email:
            logger.warning(
                "Cannot retry notification %s: user %s has no email address",
                notification.id,
                notification.user_id,
            )
            continue

        summary.attempted += 1
        try:
            serial = serials_repo.get(notification.serial_id) if notification.serial_id else None
            request = build_expiry_email(
                recipient=profile.email,
                serial_label=serial.serial_or_contract if serial else str(notification.serial_id),
                message=notification.message,
                expired=notification.title == TITLE_EXPIRED,
                urgent=notification.priority == PRIORITY_HIGH,
                action_url=notification.action_url,
            )
            if deliver(request, sender):
                notifications_repo.update_email_status(notification.id, EMAIL_STATUS_SENT)
                summary.emails_sent += 1
            else:
                notifications_repo.update_email_status(notification.id, EMAIL_STATUS_FAILED)
                summary.emails_failed += 1
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to retry notification %s", notification.id)
            summary.errors.append(f"notification {notification.id}: {exc}")

    logger.info(
        "Retried %d expiry emails: %d sent, %d failed",
        summary.attempted,
        summary.emails_sent,
        summary.emails_failed,
    )
    return summary


__all__ = ["PENDING_GRACE_PERIOD", "retry_failed_expiry_emails"]
