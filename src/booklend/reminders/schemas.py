"""Pydantic schemas for the reminder sweep."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReminderState(str, Enum):
    """Where a loan stands with respect to reminders."""

    ACTIVE_UNREMINDED = "active_unreminded"
    ACTIVE_REMINDED = "active_reminded"
    CLOSED = "closed"


class ReminderCandidate(BaseModel):
    """An active loan joined with what a reminder needs to mention."""

    loan_id: str
    owner_id: str
    owner_email: str
    book_title: str
    book_author: Optional[str] = None
    borrower_name: str
    lent_at: datetime
    due_at: datetime
    last_reminder_sent_at: Optional[datetime] = None

    def is_cooled_down(self, now: datetime, cooldown: timedelta) -> bool:
        """True if no reminder was sent within ``cooldown`` before ``now``."""
        state = reminder_state(None, self.last_reminder_sent_at, now, cooldown)
        return state == ReminderState.ACTIVE_UNREMINDED

    def is_eligible(self, now: datetime, cooldown: timedelta) -> bool:
        """Cooled down and already lent at ``now``; the mark guard rejects anything else."""
        return self.lent_at <= now and self.is_cooled_down(now, cooldown)


class SweepResult(BaseModel):
    """Summary of one sweep."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: bool = False
    upcoming_sent: int = 0
    upcoming_failed: int = 0
    overdue_digests_sent: int = 0
    overdue_digests_failed: int = 0
    overdue_loans_covered: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when nothing failed during the sweep."""
        return not (self.errors or self.upcoming_failed or self.overdue_digests_failed)


def reminder_state(
    returned_at: Optional[datetime],
    last_reminder_sent_at: Optional[datetime],
    now: datetime,
    cooldown: timedelta,
) -> ReminderState:
    """Classify a loan; closed is absorbing, a lapsed reminder counts as unreminded."""
    if returned_at is not None:
        return ReminderState.CLOSED
    if last_reminder_sent_at is not None and last_reminder_sent_at >= now - cooldown:
        return ReminderState.ACTIVE_REMINDED
    return ReminderState.ACTIVE_UNREMINDED
