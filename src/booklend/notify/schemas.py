"""Message payloads handed to notifiers."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ReminderKind(str, Enum):
    """Template used for a single-loan message."""

    UPCOMING = "upcoming"
    OVERDUE = "overdue"


class LoanNotice(BaseModel):
    """Payload of a single-loan reminder."""

    loan_id: str
    book_title: str
    book_author: Optional[str] = None
    borrower_name: str
    lent_at: datetime
    due_at: datetime
    days_until_due: int = 0
    days_overdue: int = 0


class OverdueItem(BaseModel):
    """One line of an overdue digest."""

    loan_id: str
    book_title: str
    book_author: Optional[str] = None
    borrower_name: str
    due_at: datetime
    days_overdue: int


class DeliveryResult(BaseModel):
    """Outcome of one send call. A call either fully succeeds or fails."""

    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "DeliveryResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "DeliveryResult":
        return cls(ok=False, error=error)
