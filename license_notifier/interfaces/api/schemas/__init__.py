from .notification import (
    NotificationMarkAllReadRequest,
    NotificationMarkReadRequest,
    NotificationRead,
    NotificationUpdateResult,
)
from .reminder import EmailRetryRead, ReminderRunRead

__all__ = [
    "EmailRetryRead",
    "NotificationMarkAllReadRequest",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "NotificationUpdateResult",
    "ReminderRunRead",
]
