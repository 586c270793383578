"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    user_id: str = Field(..., min_length=1)
    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")


class NotificationMarkAllReadRequest(BaseModel):
    """Payload used to mark every notification of a user as read."""

    user_id: str = Field(..., min_length=1)


class NotificationUpdateResult(BaseModel):
    updated: int


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: str
    user_id: str
    license_id: str | None = None
    serial_id: str | None = None
    is_read: bool
    priority: str
    action_required: bool
    action_url: str | None = None
    created_at: datetime
    expires_at: datetime | None = None
    email_status: str


__all__ = [
    "NotificationMarkAllReadRequest",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "NotificationUpdateResult",
]
