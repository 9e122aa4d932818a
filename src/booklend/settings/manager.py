"""Manager for owner notification preferences."""

from typing import Optional

from ..db.sqlite import Database, get_db
from .models import OwnerPreferences
from .schemas import NotificationPreferences, PreferencesUpdate


class PreferencesManager:
    """Reads and writes per-owner notification preferences."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize preferences manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def get_preferences(self, owner_id: str) -> NotificationPreferences:
        """Get preferences for an owner, defaulting to all enabled.

        A missing row is never written here; reading must not have side effects.
        """
        with self.db.get_session() as session:
            row = session.get(OwnerPreferences, owner_id)
            if row is None:
                return NotificationPreferences(owner_id=owner_id, is_default=True)
            return NotificationPreferences.model_validate(row)

    def update_preferences(
        self,
        owner_id: str,
        data: PreferencesUpdate,
    ) -> NotificationPreferences:
        """Create or update an owner's preferences.

        Args:
            owner_id: Owner ID
            data: Fields to change

        Returns:
            The effective preferences after the update
        """
        with self.db.get_session() as session:
            row = session.get(OwnerPreferences, owner_id)
            if row is None:
                row = OwnerPreferences(
                    owner_id=owner_id,
                    email_reminders_enabled=True,
                    email_upcoming_enabled=True,
                    email_overdue_enabled=True,
                )
                session.add(row)

            for field, value in data.model_dump(exclude_none=True).items():
                setattr(row, field, value)

            session.commit()
            session.refresh(row)
            return NotificationPreferences.model_validate(row)

    def reset_preferences(self, owner_id: str) -> bool:
        """Delete stored preferences so the defaults apply again.

        Returns:
            True if a row was removed
        """
        with self.db.get_session() as session:
            row = session.get(OwnerPreferences, owner_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True
