"""Persistence helpers for user profiles."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from license_notifier.domain.entities import UserProfile
from license_notifier.infrastructure.models import UserProfileModel


class UserProfileRepository:
    """Look up recipient contact details."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_map_by_ids(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        unique_ids = {str(user_id) for user_id in user_ids if user_id}
        if not unique_ids:
            return {}

        query = self.session.query(UserProfileModel).filter(
            UserProfileModel.user_id.in_(unique_ids)
        )
        return {model.user_id: self._to_entity(model) for model in query.all()}

    @staticmethod
    def _to_entity(model: UserProfileModel) -> UserProfile:
        return UserProfile(
            user_id=model.user_id,
            email=model.email,
            full_name=model.full_name,
        )


__all__ = ["UserProfileRepository"]
