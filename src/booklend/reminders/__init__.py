"""Reminder sweep: selection, digest grouping, delivery and marking."""

from .digest import OwnerDigest, build_digests, days_overdue
from .engine import ReminderEngine, build_engine
from .schemas import ReminderCandidate, ReminderState, SweepResult, reminder_state
from .store import ReminderStore, SqlReminderStore

__all__ = [
    "OwnerDigest",
    "ReminderCandidate",
    "ReminderEngine",
    "ReminderState",
    "ReminderStore",
    "SqlReminderStore",
    "SweepResult",
    "build_digests",
    "build_engine",
    "days_overdue",
    "reminder_state",
]
