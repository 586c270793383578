"""Pydantic models describing reminder run results."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReminderRunRead(BaseModel):
    """Outcome of an expiry reminder run."""

    model_config = ConfigDict(from_attributes=True)

    today: datetime
    serials_scanned: int
    expired_count: int
    expiring_soon_count: int
    skipped_count: int
    notifications_created: int
    duplicates_skipped: int
    emails_sent: int
    emails_failed: int
    emails_skipped: int
    errors: list[str] = Field(default_factory=list)


class EmailRetryRead(BaseModel):
    """Outcome of a failed-email retry pass."""

    model_config = ConfigDict(from_attributes=True)

    today: datetime
    attempted: int
    emails_sent: int
    emails_failed: int
    errors: list[str] = Field(default_factory=list)


__all__ = ["EmailRetryRead", "ReminderRunRead"]
