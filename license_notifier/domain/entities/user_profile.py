"""Domain entity representing a dashboard user profile."""

from dataclasses import dataclass


@dataclass
class UserProfile:
    """Contact information for a notification recipient."""

    user_id: str
    email: str | None
    full_name: str | None = None


__all__ = ["UserProfile"]
