"""Repository implementations for infrastructure layer."""

from .license_serial_repository import LicenseSerialRepository
from .notification_repository import DuplicateNotificationError, NotificationRepository
from .project_assign_repository import ProjectAssignRepository
from .user_profile_repository import UserProfileRepository

__all__ = [
    "DuplicateNotificationError",
    "LicenseSerialRepository",
    "NotificationRepository",
    "ProjectAssignRepository",
    "UserProfileRepository",
]
