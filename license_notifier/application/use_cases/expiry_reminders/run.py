"""Daily expiry reminder run: scan, resolve recipients, dedup, dispatch."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_notifier.config import get_settings
from license_notifier.domain.entities import ExpiryFinding, ReminderRunSummary
from license_notifier.infrastructure.email import get_mail_sender
from license_notifier.infrastructure.repositories import (
    LicenseSerialRepository,
    UserProfileRepository,
)
from license_notifier.utils import utc_day_start

from .assignments import resolve_assigned_users
from .dispatcher import DispatchOutcome, MailSender, dispatch_expiry_notification
from .scanner import scan_serials

logger = logging.getLogger(__name__)


def send_expiry_reminders(
    session: Session,
    *,
    today: datetime | None = None,
    mail_sender: MailSender | None = None,
) -> ReminderRunSummary:
    """Notify assigned users about expired and expiring license serials.

    ``today`` is truncated to the start of its UTC day and held constant for
    the whole run. Failing to list serials propagates (nothing can be done
    without them); every later failure is confined to its serial or
    (serial, user) unit.
    """

    settings = get_settings()
    reference_day = utc_day_start(today)
    sender = mail_sender or get_mail_sender()
    summary = ReminderRunSummary(today=reference_day)

    serials = LicenseSerialRepository(session).list_with_end_date()
    summary.serials_scanned = len(serials)

    scan = scan_serials(
        serials,
        reference_day,
        default_notify_days=settings.default_notify_before_days,
    )
    summary.skipped_count += len(scan.invalid)

    for finding in scan.findings:
        if finding.is_expired:
            summary.expired_count += 1
        else:
            summary.expiring_soon_count += 1
        _process_finding(
            session,
            finding,
            today=reference_day,
            mail_sender=sender,
            urgent_threshold_days=settings.urgent_threshold_days,
            summary=summary,
        )

    logger.info(
        "Expiry reminders for %s: %d serials, %d expired, %d expiring soon, "
        "%d notifications created, %d duplicates skipped, %d emails sent, "
        "%d emails failed, %d errors",
        reference_day.date().isoformat(),
        summary.serials_scanned,
        summary.expired_count,
        summary.expiring_soon_count,
        summary.notifications_created,
        summary.duplicates_skipped,
        summary.emails_sent,
        summary.emails_failed,
        len(summary.errors),
    )
    return summary


def _process_finding(
    session: Session,
    finding: ExpiryFinding,
    *,
    today: datetime,
    mail_sender: MailSender,
    urgent_threshold_days: int,
    summary: ReminderRunSummary,
) -> None:
    serial = finding.serial
    tag = (serial.project_assign or "").strip()
    if not tag:
        logger.warning(
            "Skipping serial %s: license %s has no project assignment",
            serial.id,
            serial.license_id,
        )
        summary.skipped_count += 1
        return

    try:
        user_ids = resolve_assigned_users(session, tag)
        profiles = UserProfileRepository(session).get_map_by_ids(user_ids)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Could not resolve recipients for project %s", tag)
        summary.errors.append(f"serial {serial.id}: {exc}")
        return

    if not user_ids:
        logger.info("No users assigned to project %s", tag)
        return

    for user_id in sorted(user_ids):
        try:
            outcome = dispatch_expiry_notification(
                session,
                finding,
                user_id=user_id,
                profile=profiles.get(user_id),
                today=today,
                mail_sender=mail_sender,
                urgent_threshold_days=urgent_threshold_days,
            )
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception(
                "Failed to record notification for user %s and serial %s",
                user_id,
                serial.id,
            )
            summary.errors.append(f"serial {serial.id} user {user_id}: {exc}")
            continue

        if outcome is DispatchOutcome.DEDUPED:
            summary.duplicates_skipped += 1
            continue
        summary.notifications_created += 1
        if outcome is DispatchOutcome.EMAIL_SENT:
            summary.emails_sent += 1
        elif outcome is DispatchOutcome.EMAIL_FAILED:
            summary.emails_failed += 1
        else:
            summary.emails_skipped += 1


__all__ = ["send_expiry_reminders"]
