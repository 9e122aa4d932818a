"""Recurring driver for the reminder sweep."""

from .driver import SWEEP_JOB_ID, ReminderScheduler

__all__ = ["ReminderScheduler", "SWEEP_JOB_ID"]
