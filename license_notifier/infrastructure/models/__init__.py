"""ORM models used by the application infrastructure."""

from .license import LicenseModel, LicenseSerialModel
from .notification import NotificationModel
from .project_assign import ProjectAssignModel
from .user_profile import UserProfileModel

__all__ = [
    "LicenseModel",
    "LicenseSerialModel",
    "NotificationModel",
    "ProjectAssignModel",
    "UserProfileModel",
]
