"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import expression

from license_notifier.infrastructure.database import Base


class NotificationModel(Base):
    """Database representation for user notifications.

    ``notified_on`` holds the UTC calendar day of ``created_at``; together with
    the type and the referenced ids it forms the one-per-day unique key.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint(
            "type",
            "user_id",
            "license_id",
            "serial_id",
            "notified_on",
            name="uq_notification_daily",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False, index=True)
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    license_id = Column(String(36), nullable=True, index=True)
    serial_id = Column(String(36), nullable=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    priority = Column(String(10), nullable=False, default="medium")
    action_required = Column(Boolean, nullable=False, default=False)
    action_url = Column(String(255), nullable=True)
    created_at = Column(DateTime(), nullable=False)
    notified_on = Column(Date, nullable=False)
    expires_at = Column(DateTime(), nullable=True)
    email_status = Column(String(10), nullable=False, default="pending")


__all__ = ["NotificationModel"]
