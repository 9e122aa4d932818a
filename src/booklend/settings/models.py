"""Database model for owner notification preferences."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base
from ..utils.clock import utcnow


class OwnerPreferences(Base):
    """One row per owner; a missing row means all defaults."""

    __tablename__ = "owner_preferences"

    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("owners.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email_reminders_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    email_upcoming_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    email_overdue_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
