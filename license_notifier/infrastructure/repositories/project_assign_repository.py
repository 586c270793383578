"""Persistence helpers for project assignment tags."""

from __future__ import annotations

from sqlalchemy.orm import Session

from license_notifier.infrastructure.models import ProjectAssignModel


class ProjectAssignRepository:
    """Provide read access to user/tag subscriptions."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_user_ids(self, project_assign: str) -> set[str]:
        rows = (
            self.session.query(ProjectAssignModel.user_id)
            .filter(ProjectAssignModel.project_assign == project_assign)
            .all()
        )
        return {str(user_id) for (user_id,) in rows if user_id}


__all__ = ["ProjectAssignRepository"]
