"""Reminder delivery: notifier contract and the SMTP e-mail notifier."""

from .base import Notifier
from .mailer import EmailNotifier
from .schemas import DeliveryResult, LoanNotice, OverdueItem, ReminderKind

__all__ = [
    "DeliveryResult",
    "EmailNotifier",
    "LoanNotice",
    "Notifier",
    "OverdueItem",
    "ReminderKind",
]
