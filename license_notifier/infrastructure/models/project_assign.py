"""SQLAlchemy model mapping users to project assignment tags."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from license_notifier.infrastructure.database import Base


class ProjectAssignModel(Base):
    """Database representation of a user subscribed to a project tag."""

    __tablename__ = "user_project_assigns"
    __table_args__ = (
        UniqueConstraint("user_id", "project_assign", name="uq_user_project_assign"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    project_assign = Column(String(100), nullable=False, index=True)


__all__ = ["ProjectAssignModel"]
