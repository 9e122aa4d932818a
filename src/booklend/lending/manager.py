"""Lending manager for book loan operations."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select

from ..db.models import Book
from ..db.sqlite import Database, get_db
from ..exceptions import LendingError
from ..utils.clock import start_of_day, to_naive_utc, utcnow
from .models import Loan
from .schemas import LendingStats, LoanCreate


class LendingManager:
    """Manages book lending operations."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize lending manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def create_loan(self, data: LoanCreate) -> Loan:
        """Create a new loan record.

        Args:
            data: Loan creation data

        Returns:
            Created loan

        Raises:
            LendingError: If the book is missing, owned by someone else,
                or already on loan
        """
        with self.db.get_session() as session:
            book = session.execute(
                select(Book).where(Book.id == data.book_id)
            ).scalar_one_or_none()
            if not book:
                raise LendingError("Book not found")
            if book.owner_id != data.owner_id:
                raise LendingError("Book belongs to a different owner")

            # At most one active loan per book
            existing_active = session.execute(
                select(Loan.id).where(
                    Loan.book_id == data.book_id,
                    Loan.returned_at.is_(None),
                )
            ).first()
            if existing_active:
                raise LendingError("Book is already lent out")

            loan = Loan(
                book_id=data.book_id,
                owner_id=data.owner_id,
                borrower_name=data.borrower_name,
                lent_at=to_naive_utc(data.lent_at) if data.lent_at else utcnow(),
                due_at=start_of_day(data.due_date) if data.due_date else None,
            )

            session.add(loan)
            session.commit()
            session.refresh(loan)
            session.expunge(loan)

            return loan

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        """Get a loan by ID.

        Args:
            loan_id: Loan ID

        Returns:
            Loan or None
        """
        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)
            if loan:
                session.expunge(loan)
            return loan

    def list_loans(
        self,
        owner_id: Optional[str] = None,
        book_id: Optional[str] = None,
        active_only: bool = False,
        overdue_only: bool = False,
    ) -> list[Loan]:
        """List loans with optional filters.

        Args:
            owner_id: Filter by owner
            book_id: Filter by book
            active_only: Only return loans that have not been returned
            overdue_only: Only return active loans whose due date has passed

        Returns:
            List of loans, most recent first
        """
        with self.db.get_session() as session:
            stmt = select(Loan)

            if owner_id:
                stmt = stmt.where(Loan.owner_id == owner_id)
            if book_id:
                stmt = stmt.where(Loan.book_id == book_id)
            if active_only or overdue_only:
                stmt = stmt.where(Loan.returned_at.is_(None))
            if overdue_only:
                today = start_of_day(utcnow().date())
                stmt = stmt.where(Loan.due_at.is_not(None), Loan.due_at < today)

            stmt = stmt.order_by(Loan.lent_at.desc())

            loans = session.execute(stmt).scalars().all()
            for loan in loans:
                session.expunge(loan)
            return list(loans)

    def return_loan(
        self,
        loan_id: str,
        returned_at: Optional[datetime] = None,
    ) -> Optional[Loan]:
        """Mark a loan as returned.

        Args:
            loan_id: Loan ID
            returned_at: Time of return (default: now)

        Returns:
            Updated loan or None if no such loan

        Raises:
            LendingError: If the loan was already returned
        """
        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)

            if not loan:
                return None
            if not loan.is_active:
                raise LendingError("Loan has already been returned")

            loan.returned_at = to_naive_utc(returned_at) if returned_at else utcnow()
            session.commit()
            session.refresh(loan)
            session.expunge(loan)

            return loan

    def get_loan_history_for_book(self, book_id: str) -> list[Loan]:
        """Get loan history for a specific book.

        Args:
            book_id: Book ID

        Returns:
            List of loans for the book
        """
        return self.list_loans(book_id=book_id)

    def get_stats(self, owner_id: Optional[str] = None) -> LendingStats:
        """Get lending statistics.

        Args:
            owner_id: Restrict counts to one owner

        Returns:
            LendingStats with counts
        """
        with self.db.get_session() as session:
            today = start_of_day(utcnow().date())

            def count(*criteria) -> int:
                stmt = select(func.count()).select_from(Loan)
                if criteria:
                    stmt = stmt.where(*criteria)
                if owner_id:
                    stmt = stmt.where(Loan.owner_id == owner_id)
                return session.execute(stmt).scalar() or 0

            return LendingStats(
                total_loans=count(),
                currently_lent=count(Loan.returned_at.is_(None)),
                overdue=count(
                    Loan.returned_at.is_(None),
                    Loan.due_at.is_not(None),
                    Loan.due_at < today,
                ),
                returned=count(Loan.returned_at.is_not(None)),
            )
