"""Shared fixtures: a throwaway SQLite store and a recording mail sender."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from license_notifier.config import reset_settings_cache
from license_notifier.domain.entities import NOTIFICATION_TYPE_EXPIRY, EmailDispatchRequest
from license_notifier.infrastructure import database
from license_notifier.infrastructure import email as email_module
from license_notifier.infrastructure.models import (
    LicenseModel,
    LicenseSerialModel,
    NotificationModel,
    ProjectAssignModel,
    UserProfileModel,
)

_CONFIG_VARIABLES = (
    "SENDGRID_API_KEY",
    "SENDGRID_SENDER",
    "SERVICE_TOKEN",
    "APP_BASE_URL",
    "DEFAULT_NOTIFY_BEFORE_DAYS",
    "URGENT_THRESHOLD_DAYS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def configured_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Point the settings at a fresh SQLite file for every test."""

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'licenses.db'}")
    for name in _CONFIG_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    database.reset_engine()
    yield
    database.reset_engine()
    reset_settings_cache()


@pytest.fixture()
def session():
    database.initialize_database()
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


class StoreSeeder:
    """Insert license store rows with terse defaults."""

    def __init__(self, session) -> None:
        self.session = session

    def license(self, license_id: str, *, item: str = "Microsoft 365 E3", tag: str | None = "NPT"):
        self.session.add(
            LicenseModel(id=license_id, item_description=item, project_assign=tag)
        )
        self.session.commit()

    def serial(
        self,
        serial_id: str,
        *,
        license_id: str,
        label: str,
        end_date: date | None,
        notify_before_days: int | None = 30,
    ):
        self.session.add(
            LicenseSerialModel(
                id=serial_id,
                license_id=license_id,
                serial_or_contract=label,
                end_date=end_date,
                notify_before_days=notify_before_days,
            )
        )
        self.session.commit()

    def user(self, user_id: str, *, tags: tuple[str, ...] = ("NPT",), email: str | None = "auto"):
        if email == "auto":
            email = f"{user_id}@example.com"
        if email is not None:
            self.session.add(UserProfileModel(user_id=user_id, email=email, full_name=user_id.title()))
        for tag in tags:
            self.session.add(ProjectAssignModel(user_id=user_id, project_assign=tag))
        self.session.commit()

    def sent_notification(
        self, *, user_id: str, license_id: str, serial_id: str, created_at: datetime
    ):
        self.session.add(
            NotificationModel(
                type=NOTIFICATION_TYPE_EXPIRY,
                title="Serial License Expiring Soon",
                message="already sent",
                license_id=license_id,
                serial_id=serial_id,
                user_id=user_id,
                priority="medium",
                action_required=True,
                created_at=created_at,
                notified_on=created_at.date(),
                email_status="sent",
            )
        )
        self.session.commit()

    def notifications(self) -> list[NotificationModel]:
        self.session.expire_all()
        return (
            self.session.query(NotificationModel)
            .order_by(NotificationModel.id)
            .all()
        )


@pytest.fixture()
def seed(session) -> StoreSeeder:
    return StoreSeeder(session)


class RecordingMailSender:
    """Mail sender double that records requests and can fail per recipient."""

    def __init__(self) -> None:
        self.requests: list[EmailDispatchRequest] = []
        self.reject: set[str] = set()
        self.explode: set[str] = set()

    def __call__(self, request: EmailDispatchRequest) -> bool:
        if request.to in self.explode:
            raise ConnectionError(f"gateway unreachable for {request.to}")
        if request.to in self.reject:
            return False
        self.requests.append(request)
        return True

    @property
    def recipients(self) -> list[str]:
        return [request.to for request in self.requests]


@pytest.fixture()
def mail() -> RecordingMailSender:
    return RecordingMailSender()


@pytest.fixture()
def mail_gateway(mail, monkeypatch: pytest.MonkeyPatch) -> RecordingMailSender:
    """Route the default mail sender of runs and retries to ``mail``."""

    monkeypatch.setattr(email_module, "deliver_email_request", mail)
    return mail
