"""Read access to license serials joined with their owning license."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import String, select, type_coerce
from sqlalchemy.orm import Session

from license_notifier.domain.entities import LicenseSerial
from license_notifier.infrastructure.models import LicenseModel, LicenseSerialModel


class LicenseSerialRepository:
    """Query serials together with the license fields the reminders need."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, serial_id: str) -> LicenseSerial | None:
        row = self.session.execute(
            self._base_statement().where(LicenseSerialModel.id == serial_id)
        ).first()
        return self._to_entity(row) if row else None

    def list_with_end_date(self) -> Sequence[LicenseSerial]:
        statement = (
            self._base_statement()
            .where(LicenseSerialModel.end_date.is_not(None))
            .order_by(LicenseSerialModel.license_id, LicenseSerialModel.id)
        )
        return [self._to_entity(row) for row in self.session.execute(statement)]

    @staticmethod
    def _base_statement():
        # Dates are read without the Date result processor so a malformed
        # value only affects its own row.
        return (
            select(
                LicenseSerialModel.id,
                LicenseSerialModel.license_id,
                LicenseSerialModel.serial_or_contract,
                type_coerce(LicenseSerialModel.start_date, String).label("start_date"),
                type_coerce(LicenseSerialModel.end_date, String).label("end_date"),
                LicenseSerialModel.notify_before_days,
                LicenseModel.item_description,
                LicenseModel.project_assign,
            )
            .join(LicenseModel, LicenseModel.id == LicenseSerialModel.license_id)
        )

    @staticmethod
    def _to_entity(row) -> LicenseSerial:
        return LicenseSerial(
            id=row.id,
            license_id=row.license_id,
            serial_or_contract=row.serial_or_contract,
            start_date=row.start_date,
            end_date=row.end_date,
            notify_before_days=row.notify_before_days,
            item_description=row.item_description or "",
            project_assign=row.project_assign,
        )


__all__ = ["LicenseSerialRepository"]
