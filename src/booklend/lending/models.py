"""SQLAlchemy model for book loans.

A loan is active until ``returned_at`` is set. The reminder sweep only ever
writes ``last_reminder_sent_at``.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.models import Base, Book, Owner, generate_uuid
from ..utils.clock import utcnow


class Loan(Base):
    """Loan model - one record per lend event."""

    __tablename__ = "loans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("owners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    borrower_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Dates (naive UTC)
    lent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    due_at: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)
    returned_at: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)
    last_reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    book: Mapped["Book"] = relationship("Book")
    owner: Mapped["Owner"] = relationship("Owner")

    def __repr__(self) -> str:
        state = "active" if self.is_active else "closed"
        return f"<Loan(id={self.id}, book_id={self.book_id}, {state})>"

    @property
    def is_active(self) -> bool:
        """A loan stays active until it is returned."""
        return self.returned_at is None

    @property
    def days_until_due(self) -> Optional[int]:
        """Days until due (negative if overdue)."""
        if not self.due_at:
            return None
        return (self.due_at.date() - utcnow().date()).days

    @property
    def is_overdue(self) -> bool:
        """Check if loan is overdue."""
        days = self.days_until_due
        return self.is_active and days is not None and days < 0

    @property
    def days_overdue(self) -> int:
        """Days overdue (0 if not overdue)."""
        days = self.days_until_due
        if days is None or days >= 0:
            return 0
        return abs(days)
