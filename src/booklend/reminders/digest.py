"""Grouping of overdue loans into one digest per owner.

Groups are built in a single pass and committed independently, so one
owner's failed send cannot affect another owner's loans.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from ..notify.schemas import OverdueItem
from .schemas import ReminderCandidate


def days_overdue(due_at: datetime, now: datetime) -> int:
    """Whole days elapsed between ``due_at`` and ``now``."""
    return max(0, int((now - due_at).total_seconds() // 86400))


@dataclass
class OwnerDigest:
    """Everything needed to send and commit one owner's digest."""

    owner_id: str
    address: str
    items: list[OverdueItem] = field(default_factory=list)
    loan_ids: list[str] = field(default_factory=list)

    def add(self, candidate: ReminderCandidate, now: datetime) -> None:
        self.items.append(
            OverdueItem(
                loan_id=candidate.loan_id,
                book_title=candidate.book_title,
                book_author=candidate.book_author,
                borrower_name=candidate.borrower_name,
                due_at=candidate.due_at,
                days_overdue=days_overdue(candidate.due_at, now),
            )
        )
        self.loan_ids.append(candidate.loan_id)

    def sort(self) -> None:
        """Oldest due date first."""
        pairs = sorted(zip(self.items, self.loan_ids), key=lambda pair: pair[0].due_at)
        self.items = [item for item, _ in pairs]
        self.loan_ids = [loan_id for _, loan_id in pairs]


def build_digests(candidates: Iterable[ReminderCandidate], now: datetime) -> list[OwnerDigest]:
    """Group overdue candidates by owner.

    Args:
        candidates: Loans already filtered for eligibility
        now: Sweep time used for days-overdue

    Returns:
        One digest per owner, items ordered by due date ascending
    """
    digests: dict[str, OwnerDigest] = {}
    for candidate in candidates:
        digest = digests.get(candidate.owner_id)
        if digest is None:
            digest = OwnerDigest(owner_id=candidate.owner_id, address=candidate.owner_email)
            digests[candidate.owner_id] = digest
        digest.add(candidate, now)

    for digest in digests.values():
        digest.sort()
    return list(digests.values())
