"""Owner notification preferences."""

from .manager import PreferencesManager
from .models import OwnerPreferences
from .schemas import NotificationPreferences, PreferencesUpdate

__all__ = [
    "NotificationPreferences",
    "OwnerPreferences",
    "PreferencesManager",
    "PreferencesUpdate",
]
