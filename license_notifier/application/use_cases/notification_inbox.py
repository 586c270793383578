"""Use cases for reading and managing a user's notifications."""

from sqlalchemy.orm import Session

from license_notifier.domain.entities import Notification
from license_notifier.infrastructure.repositories import NotificationRepository


def list_notifications(
    session: Session, *, user_id: str, unread_only: bool = False, limit: int = 50
) -> list[Notification]:
    """Return the most recent notifications addressed to ``user_id``."""

    repository = NotificationRepository(session)
    return list(repository.list_for_user(user_id, unread_only=unread_only, limit=limit))


def mark_notifications_read(
    session: Session, *, user_id: str, notification_ids: list[int]
) -> int:
    """Flag the given notifications as read and return how many changed."""

    unique_ids = list(dict.fromkeys(notification_ids))
    return NotificationRepository(session).mark_as_read(unique_ids, user_id=user_id)


def mark_all_notifications_read(session: Session, *, user_id: str) -> int:
    return NotificationRepository(session).mark_all_as_read(user_id=user_id)


def delete_notification(session: Session, *, notification_id: int, user_id: str) -> None:
    """Remove a notification owned by ``user_id`` or raise an error."""

    if not NotificationRepository(session).delete(notification_id, user_id=user_id):
        raise ValueError("Notification not found")


__all__ = [
    "list_notifications",
    "mark_notifications_read",
    "mark_all_notifications_read",
    "delete_notification",
]
