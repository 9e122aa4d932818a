"""Notifier protocol defining the contract for reminder delivery.

Implementations report success or failure per call and never retry; retry
is driven entirely by the reminder cooldown.
"""

from typing import Protocol, Sequence, runtime_checkable

from .schemas import DeliveryResult, LoanNotice, OverdueItem, ReminderKind


@runtime_checkable
class Notifier(Protocol):
    """Protocol for reminder delivery channels."""

    def is_configured(self) -> bool: ...

    def send_single(
        self, address: str, kind: ReminderKind, notice: LoanNotice
    ) -> DeliveryResult: ...

    def send_digest(self, address: str, items: Sequence[OverdueItem]) -> DeliveryResult: ...
