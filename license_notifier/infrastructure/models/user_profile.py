"""SQLAlchemy model for dashboard user profiles."""

from sqlalchemy import Column, String

from license_notifier.infrastructure.database import Base


class UserProfileModel(Base):
    """Contact details of a dashboard user."""

    __tablename__ = "user_profiles"

    user_id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=True, index=True)
    full_name = Column(String(255), nullable=True)


__all__ = ["UserProfileModel"]
