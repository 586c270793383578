"""Endpoints for a user's notification inbox."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from license_notifier.application.use_cases.notification_inbox import (
    delete_notification as delete_notification_uc,
    list_notifications as list_notifications_uc,
    mark_all_notifications_read,
    mark_notifications_read,
)
from license_notifier.domain.entities import Notification
from license_notifier.infrastructure.database import get_db
from license_notifier.interfaces.api.dependencies import require_service_token
from license_notifier.interfaces.api.schemas import (
    NotificationMarkAllReadRequest,
    NotificationMarkReadRequest,
    NotificationRead,
    NotificationUpdateResult,
)

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(require_service_token)],
)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    user_id: str = Query(..., min_length=1),
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[NotificationRead]:
    """Return the most recent notifications for ``user_id``."""

    notifications = list_notifications_uc(
        db, user_id=user_id, unread_only=unread_only, limit=limit
    )
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("/read", response_model=NotificationUpdateResult)
def mark_read(
    payload: NotificationMarkReadRequest, db: Session = Depends(get_db)
) -> NotificationUpdateResult:
    updated = mark_notifications_read(
        db, user_id=payload.user_id, notification_ids=payload.ids
    )
    return NotificationUpdateResult(updated=updated)


@router.post("/read-all", response_model=NotificationUpdateResult)
def mark_all_read(
    payload: NotificationMarkAllReadRequest, db: Session = Depends(get_db)
) -> NotificationUpdateResult:
    updated = mark_all_notifications_read(db, user_id=payload.user_id)
    return NotificationUpdateResult(updated=updated)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    user_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> Response:
    """Delete the notification identified by ``notification_id``."""

    try:
        delete_notification_uc(db, notification_id=notification_id, user_id=user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
