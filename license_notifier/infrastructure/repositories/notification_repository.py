"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from license_notifier.domain.entities import (
    EMAIL_STATUS_FAILED,
    EMAIL_STATUS_PENDING,
    Notification,
)
from license_notifier.infrastructure.models import NotificationModel
from license_notifier.utils import ensure_utc, ensure_utc_naive, now_in_utc


class DuplicateNotificationError(Exception):
    """Raised when the daily unique key already holds a notification."""


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_awaiting_email_retry(
        self, *, notification_type: str, since: datetime, pending_before: datetime
    ) -> Sequence[Notification]:
        """Return failed emails plus ``pending`` ones left behind by an earlier run."""

        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.type == notification_type)
            .filter(
                or_(
                    NotificationModel.email_status == EMAIL_STATUS_FAILED,
                    and_(
                        NotificationModel.email_status == EMAIL_STATUS_PENDING,
                        NotificationModel.created_at < ensure_utc_naive(pending_before),
                    ),
                )
            )
            .filter(NotificationModel.created_at >= ensure_utc_naive(since))
            .order_by(NotificationModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def exists_since(
        self,
        *,
        notification_type: str,
        user_id: str,
        license_id: str,
        serial_id: str,
        since: datetime,
    ) -> bool:
        query = (
            self.session.query(NotificationModel.id)
            .filter(NotificationModel.type == notification_type)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.license_id == license_id)
            .filter(NotificationModel.serial_id == serial_id)
            .filter(NotificationModel.created_at >= ensure_utc_naive(since))
            .limit(1)
        )
        return query.first() is not None

    def create(self, notification: Notification) -> Notification:
        """Insert ``notification``.

        Raises :class:`DuplicateNotificationError` when a row with the same
        type, user, license, serial and UTC day already exists.
        """

        model = NotificationModel()
        self._apply_entity_to_model(model, notification, include_creation_fields=True)
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateNotificationError(
                f"Notification already recorded for user {notification.user_id} "
                f"and serial {notification.serial_id}"
            ) from exc
        self.session.refresh(model)
        return self._to_entity(model)

    def update_email_status(self, notification_id: int, email_status: str) -> None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)
        model.email_status = email_status
        self.session.add(model)
        self.session.commit()

    def mark_as_read(self, notification_ids: Iterable[int], *, user_id: str) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def mark_all_as_read(self, *, user_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def delete(self, notification_id: int, *, user_id: str) -> bool:
        model = self.session.get(NotificationModel, notification_id)
        if model is None or model.user_id != user_id:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel,
        notification: Notification,
        *,
        include_creation_fields: bool,
    ) -> None:
        if include_creation_fields:
            created_at = ensure_utc_naive(notification.created_at or now_in_utc())
            model.created_at = created_at
            model.notified_on = created_at.date()
        model.type = notification.type
        model.title = notification.title
        model.message = notification.message
        model.license_id = notification.license_id
        model.serial_id = notification.serial_id
        model.user_id = notification.user_id
        model.is_read = notification.is_read
        model.priority = notification.priority
        model.action_required = notification.action_required
        model.action_url = notification.action_url
        model.expires_at = ensure_utc_naive(notification.expires_at)
        model.email_status = notification.email_status

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            type=model.type,
            title=model.title,
            message=model.message,
            user_id=model.user_id,
            license_id=model.license_id,
            serial_id=model.serial_id,
            is_read=bool(model.is_read),
            priority=model.priority,
            action_required=bool(model.action_required),
            action_url=model.action_url,
            created_at=ensure_utc(model.created_at),
            expires_at=ensure_utc(model.expires_at),
            email_status=model.email_status,
        )


__all__ = ["DuplicateNotificationError", "NotificationRepository"]
