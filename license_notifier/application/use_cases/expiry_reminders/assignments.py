"""Resolve which users follow a project assignment tag."""

from __future__ import annotations

from sqlalchemy.orm import Session

from license_notifier.infrastructure.repositories import ProjectAssignRepository


def resolve_assigned_users(session: Session, project_assign: str) -> set[str]:
    """Return the identifiers of users subscribed to ``project_assign``.

    An empty tag is rejected: untagged licenses notify nobody.
    """

    tag = (project_assign or "").strip()
    if not tag:
        raise ValueError("project_assign tag is required to resolve recipients")
    return ProjectAssignRepository(session).list_user_ids(tag)


__all__ = ["resolve_assigned_users"]
