"""SQLAlchemy models for licenses and their serials."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from license_notifier.infrastructure.database import Base


class LicenseModel(Base):
    """Database representation of a purchased license."""

    __tablename__ = "licenses"

    id = Column(String(36), primary_key=True)
    item_description = Column(Text, nullable=False, default="")
    project_assign = Column(String(100), nullable=True, index=True)
    created_by = Column(String(36), nullable=True)

    serials = relationship(
        "LicenseSerialModel",
        back_populates="license",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class LicenseSerialModel(Base):
    """Database representation of a serial or contract line under a license."""

    __tablename__ = "license_serials"

    id = Column(String(36), primary_key=True)
    license_id = Column(
        String(36),
        ForeignKey("licenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    serial_or_contract = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True, index=True)
    notify_before_days = Column(Integer, nullable=True)

    license = relationship("LicenseModel", back_populates="serials", lazy="joined")


__all__ = ["LicenseModel", "LicenseSerialModel"]
