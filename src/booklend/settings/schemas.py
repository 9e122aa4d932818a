"""Pydantic schemas for owner notification preferences."""

from typing import Optional

from pydantic import BaseModel


class NotificationPreferences(BaseModel):
    """Effective notification preferences for an owner."""

    owner_id: str
    email_reminders_enabled: bool = True
    email_upcoming_enabled: bool = True
    email_overdue_enabled: bool = True
    is_default: bool = False

    model_config = {"from_attributes": True}

    @property
    def wants_upcoming(self) -> bool:
        """Upcoming-due e-mails need both the master and the upcoming switch."""
        return self.email_reminders_enabled and self.email_upcoming_enabled

    @property
    def wants_overdue(self) -> bool:
        """Overdue e-mails need both the master and the overdue switch."""
        return self.email_reminders_enabled and self.email_overdue_enabled


class PreferencesUpdate(BaseModel):
    """Partial update; unset fields keep their current value."""

    email_reminders_enabled: Optional[bool] = None
    email_upcoming_enabled: Optional[bool] = None
    email_overdue_enabled: Optional[bool] = None
