"""End-to-end tests of the reminder run against a SQLite store."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from license_notifier.application.use_cases.expiry_reminders import (
    DispatchOutcome,
    classify_serial,
    dispatch_expiry_notification,
    retry_failed_expiry_emails,
    send_expiry_reminders,
)
from license_notifier.application.use_cases.expiry_reminders import dispatcher as dispatcher_module
from license_notifier.domain.entities import LicenseSerial, Notification, UserProfile
from license_notifier.infrastructure.repositories import NotificationRepository
from license_notifier.utils import now_in_utc

TODAY = datetime(2024, 2, 15, tzinfo=timezone.utc)


@pytest.fixture()
def expiring_serial(seed):
    seed.license("L1", item="Office 365", tag="NPT")
    seed.serial("S1", license_id="L1", label="SN-001", end_date=date(2024, 3, 10))


def test_only_users_not_yet_notified_today_receive_notification(session, seed, mail, expiring_serial):
    seed.user("alice")
    seed.user("bob")
    seed.sent_notification(
        user_id="alice",
        license_id="L1",
        serial_id="S1",
        created_at=datetime(2024, 2, 15, 6, 0),
    )

    summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.notifications_created == 1
    assert summary.duplicates_skipped == 1
    assert mail.recipients == ["bob@example.com"]
    rows = seed.notifications()
    assert len(rows) == 2
    new_row = rows[-1]
    assert new_row.user_id == "bob"
    assert new_row.message == "SN-001 for Office 365 expires in 24 day(s)"
    assert new_row.email_status == "sent"


def test_notification_from_yesterday_does_not_block_today(session, seed, mail, expiring_serial):
    seed.user("alice")
    seed.sent_notification(
        user_id="alice",
        license_id="L1",
        serial_id="S1",
        created_at=datetime(2024, 2, 14, 23, 59),
    )

    summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.notifications_created == 1
    assert mail.recipients == ["alice@example.com"]


def test_second_run_on_same_day_creates_nothing(session, seed, mail, expiring_serial):
    seed.user("alice")
    seed.user("bob")

    first = send_expiry_reminders(session, today=TODAY, mail_sender=mail)
    second = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert first.notifications_created == 2
    assert second.notifications_created == 0
    assert second.duplicates_skipped == 2
    assert len(mail.requests) == 2
    assert len(seed.notifications()) == 2


def test_mail_failure_for_one_recipient_does_not_stop_the_others(session, seed, mail, caplog):
    seed.license("L1", item="Veeam Backup", tag="NPT")
    seed.serial("S1", license_id="L1", label="VB-77", end_date=date(2024, 1, 1))
    for user_id in ("ann", "ben", "cat"):
        seed.user(user_id)
    mail.explode.add("ben@example.com")

    with caplog.at_level("ERROR"):
        summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.notifications_created == 3
    assert summary.emails_sent == 2
    assert summary.emails_failed == 1
    assert summary.errors == []
    assert sorted(mail.recipients) == ["ann@example.com", "cat@example.com"]
    statuses = {row.user_id: row.email_status for row in seed.notifications()}
    assert statuses == {"ann": "sent", "ben": "failed", "cat": "sent"}
    assert "ben@example.com" in caplog.text


def test_store_error_for_one_recipient_is_confined_to_that_unit(session, seed, mail, monkeypatch, caplog):
    seed.license("L1", item="Veeam Backup", tag="NPT")
    seed.serial("S1", license_id="L1", label="VB-77", end_date=date(2024, 1, 1))
    for user_id in ("ann", "ben", "cat"):
        seed.user(user_id)
    exists_since = NotificationRepository.exists_since

    def flaky_exists_since(self, **criteria):
        if criteria["user_id"] == "ben":
            raise OperationalError("SELECT notifications", {}, Exception("lock wait timeout"))
        return exists_since(self, **criteria)

    monkeypatch.setattr(NotificationRepository, "exists_since", flaky_exists_since)

    with caplog.at_level("ERROR"):
        summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.notifications_created == 2
    assert len(summary.errors) == 1
    assert summary.errors[0].startswith("serial S1 user ben:")
    assert sorted(mail.recipients) == ["ann@example.com", "cat@example.com"]
    assert sorted(row.user_id for row in seed.notifications()) == ["ann", "cat"]
    assert "Failed to record notification for user ben" in caplog.text


def test_expired_email_is_marked_urgent(session, seed, mail):
    seed.license("L1", item="Veeam Backup", tag="NPT")
    seed.serial("S1", license_id="L1", label="VB-77", end_date=date(2024, 1, 1))
    seed.user("ann")

    send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    (request,) = mail.requests
    assert request.subject == "URGENT: VB-77 License Expired"
    assert "URGENT" in request.html
    assert "VB-77 for Veeam Backup expired 45 day(s) ago" in request.html
    (row,) = seed.notifications()
    assert row.priority == "high"
    assert row.title == "Serial License Expired"


def test_expiring_email_is_marked_important(session, seed, mail, expiring_serial):
    seed.user("ann")

    send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    (request,) = mail.requests
    assert request.subject == "IMPORTANT: SN-001 License Expiring Soon"


def test_license_without_project_tag_notifies_nobody(session, seed, mail, caplog):
    seed.license("L1", tag="")
    seed.license("L2", tag=None)
    seed.serial("S1", license_id="L1", label="SN-1", end_date=date(2024, 1, 1))
    seed.serial("S2", license_id="L2", label="SN-2", end_date=date(2024, 2, 20))
    seed.user("ann", tags=("NPT", ""))

    with caplog.at_level("WARNING"):
        summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.notifications_created == 0
    assert summary.skipped_count == 2
    assert mail.requests == []
    assert seed.notifications() == []
    assert "has no project assignment" in caplog.text


def test_tag_without_assigned_users_is_not_an_error(session, seed, mail, expiring_serial):
    seed.user("bob", tags=("OTHER",))

    summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.expiring_soon_count == 1
    assert summary.notifications_created == 0
    assert summary.errors == []
    assert mail.requests == []


def test_serials_outside_the_window_are_left_alone(session, seed, mail):
    seed.license("L1")
    seed.serial("S1", license_id="L1", label="SN-1", end_date=date(2024, 6, 1))
    seed.serial("S2", license_id="L1", label="SN-2", end_date=None)
    seed.user("ann")

    summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.serials_scanned == 1
    assert summary.expired_count == summary.expiring_soon_count == 0
    assert seed.notifications() == []


def test_malformed_end_date_is_skipped(session, seed, mail, caplog):
    seed.license("L1")
    seed.serial("BAD", license_id="L1", label="SN-BAD", end_date=date(2024, 3, 1))
    seed.serial("S1", license_id="L1", label="SN-1", end_date=date(2024, 3, 1))
    seed.user("ann")
    session.execute(text("UPDATE license_serials SET end_date = 'soon-ish' WHERE id = 'BAD'"))
    session.commit()

    with caplog.at_level("WARNING"):
        summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.skipped_count == 1
    assert summary.notifications_created == 1
    assert [row.serial_id for row in seed.notifications()] == ["S1"]
    assert "Skipping serial BAD" in caplog.text


def test_user_without_email_still_gets_in_app_notification(session, seed, mail, expiring_serial):
    seed.user("ghost", email=None)

    summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.notifications_created == 1
    assert summary.emails_skipped == 1
    assert mail.requests == []
    (row,) = seed.notifications()
    assert row.email_status == "skipped"


def test_insert_conflict_counts_as_already_sent(session, seed, mail, monkeypatch, expiring_serial):
    seed.user("alice")
    serial = LicenseSerial(
        id="S1",
        license_id="L1",
        serial_or_contract="SN-001",
        end_date=date(2024, 3, 10),
        item_description="Office 365",
        project_assign="NPT",
    )
    finding = classify_serial(serial, TODAY)
    profile = UserProfile(user_id="alice", email="alice@example.com")

    first = dispatch_expiry_notification(
        session, finding, user_id="alice", profile=profile, today=TODAY, mail_sender=mail
    )
    # Simulate a concurrent run whose read happened before the first insert.
    monkeypatch.setattr(dispatcher_module, "notification_sent_today", lambda *a, **k: False)
    second = dispatch_expiry_notification(
        session, finding, user_id="alice", profile=profile, today=TODAY, mail_sender=mail
    )

    assert first is DispatchOutcome.EMAIL_SENT
    assert second is DispatchOutcome.DEDUPED
    assert len(mail.requests) == 1
    assert len(seed.notifications()) == 1


def test_retry_resends_failed_emails(session, seed, mail, expiring_serial):
    seed.user("ann")
    seed.user("ben")
    mail.reject.add("ben@example.com")
    send_expiry_reminders(session, today=TODAY, mail_sender=mail)
    mail.reject.clear()

    summary = retry_failed_expiry_emails(session, today=TODAY, mail_sender=mail)

    assert summary.attempted == 1
    assert summary.emails_sent == 1
    assert mail.recipients == ["ann@example.com", "ben@example.com"]
    assert mail.requests[-1].subject == "IMPORTANT: SN-001 License Expiring Soon"
    assert {row.email_status for row in seed.notifications()} == {"sent"}

    again = retry_failed_expiry_emails(session, today=TODAY, mail_sender=mail)
    assert again.attempted == 0


def test_custom_default_window_from_settings(session, seed, mail, monkeypatch):
    from license_notifier.config import reset_settings_cache

    monkeypatch.setenv("DEFAULT_NOTIFY_BEFORE_DAYS", "60")
    reset_settings_cache()
    seed.license("L1")
    seed.serial("S1", license_id="L1", label="SN-1", end_date=date(2024, 4, 1), notify_before_days=None)
    seed.user("ann")

    summary = send_expiry_reminders(session, today=TODAY, mail_sender=mail)

    assert summary.expiring_soon_count == 1


def test_retry_store_error_only_affects_its_notification(session, seed, mail, monkeypatch, expiring_serial):
    for user_id in ("ann", "ben", "cat"):
        seed.user(user_id)
    mail.reject.update({"ann@example.com", "ben@example.com", "cat@example.com"})
    send_expiry_reminders(session, today=TODAY, mail_sender=mail)
    mail.reject.clear()
    ben_id = next(row.id for row in seed.notifications() if row.user_id == "ben")
    update_email_status = NotificationRepository.update_email_status

    def flaky_update(self, notification_id, email_status):
        if notification_id == ben_id:
            raise OperationalError("UPDATE notifications", {}, Exception("deadlock"))
        return update_email_status(self, notification_id, email_status)

    monkeypatch.setattr(NotificationRepository, "update_email_status", flaky_update)

    summary = retry_failed_expiry_emails(session, today=TODAY, mail_sender=mail)

    assert summary.attempted == 3
    assert summary.emails_sent == 2
    assert len(summary.errors) == 1
    statuses = {row.user_id: row.email_status for row in seed.notifications()}
    assert statuses == {"ann": "sent", "ben": "failed", "cat": "sent"}


def _stored_notification(session, *, user_id: str, created_at: datetime) -> Notification:
    return NotificationRepository(session).create(
        Notification(
            id=None,
            type="expiry",
            title="Serial License Expiring Soon",
            message="SN-001 for Office 365 expires in 24 day(s)",
            user_id=user_id,
            license_id="L1",
            serial_id="S1",
            priority="medium",
            action_required=True,
            action_url="/licenses/L1?serial=S1",
            created_at=created_at,
        )
    )


def test_retry_picks_up_notifications_left_pending(session, seed, mail, expiring_serial):
    seed.user("ann")
    seed.user("ben")
    stale = _stored_notification(session, user_id="ann", created_at=now_in_utc() - timedelta(hours=1))
    fresh = _stored_notification(session, user_id="ben", created_at=now_in_utc())

    summary = retry_failed_expiry_emails(session, today=TODAY, mail_sender=mail)

    assert summary.attempted == 1
    assert mail.recipients == ["ann@example.com"]
    statuses = {row.id: row.email_status for row in seed.notifications()}
    assert statuses == {stale.id: "sent", fresh.id: "pending"}
