"""Pydantic schemas for book lending."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.clock import to_naive_utc, utcnow


class LoanStatus(str, Enum):
    """Status of a loan."""

    ACTIVE = "active"
    RETURNED = "returned"


class LoanCreate(BaseModel):
    """Schema for creating a loan."""

    book_id: str
    owner_id: str
    borrower_name: str = Field(..., max_length=200)
    lent_at: Optional[datetime] = None
    due_date: Optional[date] = None

    @field_validator("borrower_name")
    @classmethod
    def borrower_not_blank(cls, v: str) -> str:
        """Borrower name is required free text."""
        v = v.strip()
        if not v:
            raise ValueError("borrower_name must not be empty")
        return v

    @field_validator("lent_at")
    @classmethod
    def lent_not_in_future(cls, v: Optional[datetime]) -> Optional[datetime]:
        """A loan cannot start after the moment it is recorded."""
        if v is not None and to_naive_utc(v) > utcnow():
            raise ValueError("lent_at must not be in the future")
        return v

    @model_validator(mode="after")
    def due_not_before_lent(self) -> "LoanCreate":
        """Validate due date is not before the lend date."""
        if self.due_date and self.lent_at and self.due_date < self.lent_at.date():
            raise ValueError("due_date must not be before lent_at")
        return self


class LoanResponse(BaseModel):
    """Schema for loan responses."""

    id: str
    book_id: str
    owner_id: str
    borrower_name: str
    status: LoanStatus
    lent_at: datetime
    due_at: Optional[datetime]
    returned_at: Optional[datetime]
    last_reminder_sent_at: Optional[datetime]
    is_overdue: bool
    days_until_due: Optional[int]
    days_overdue: int

    # Related data (populated by manager)
    book_title: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_loan(cls, loan, book_title: Optional[str] = None) -> "LoanResponse":
        """Build a response from a Loan row."""
        return cls(
            id=loan.id,
            book_id=loan.book_id,
            owner_id=loan.owner_id,
            borrower_name=loan.borrower_name,
            status=LoanStatus.ACTIVE if loan.is_active else LoanStatus.RETURNED,
            lent_at=loan.lent_at,
            due_at=loan.due_at,
            returned_at=loan.returned_at,
            last_reminder_sent_at=loan.last_reminder_sent_at,
            is_overdue=loan.is_overdue,
            days_until_due=loan.days_until_due,
            days_overdue=loan.days_overdue,
            book_title=book_title,
        )


class LendingStats(BaseModel):
    """Overall lending statistics."""

    total_loans: int
    currently_lent: int
    overdue: int
    returned: int
