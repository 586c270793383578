"""HTTP trigger for the expiry reminder run."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_notifier.application.use_cases.expiry_reminders import (
    retry_failed_expiry_emails,
    send_expiry_reminders,
)
from license_notifier.infrastructure.database import get_db
from license_notifier.interfaces.api.dependencies import require_service_token
from license_notifier.interfaces.api.schemas import EmailRetryRead, ReminderRunRead

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reminders",
    tags=["reminders"],
    dependencies=[Depends(require_service_token)],
)


@router.post("/expiry/run", response_model=ReminderRunRead)
def run_expiry_reminders(db: Session = Depends(get_db)) -> ReminderRunRead:
    """Scan serials and notify assigned users about expiring licenses."""

    try:
        summary = send_expiry_reminders(db)
    except SQLAlchemyError as exc:
        logger.exception("Expiry reminder run aborted: license store unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="License store unavailable",
        ) from exc
    return ReminderRunRead.model_validate(summary)


@router.post("/expiry/retry", response_model=EmailRetryRead)
def retry_expiry_emails(db: Session = Depends(get_db)) -> EmailRetryRead:
    """Re-send today's expiry emails that the mail gateway did not accept."""

    try:
        summary = retry_failed_expiry_emails(db)
    except SQLAlchemyError as exc:
        logger.exception("Expiry email retry aborted: license store unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="License store unavailable",
        ) from exc
    return EmailRetryRead.model_validate(summary)


__all__ = ["router"]
