"""Lending store contract used by the reminder engine, and its SQL implementation."""

from datetime import date, datetime, timedelta
from typing import Protocol, Sequence, runtime_checkable

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..db.models import Book, Owner
from ..db.sqlite import Database
from ..exceptions import ReminderStoreError
from ..lending.models import Loan
from ..settings.manager import PreferencesManager
from ..settings.schemas import NotificationPreferences
from ..utils.clock import start_of_day
from ..utils.logging import get_logger
from .schemas import ReminderCandidate

logger = get_logger(__name__)


@runtime_checkable
class ReminderStore(Protocol):
    """Read/write contract the reminder engine needs from the lending store."""

    def list_active_loans_due_on(self, day: date) -> list[ReminderCandidate]: ...

    def list_active_overdue_loans(self, as_of: date) -> list[ReminderCandidate]: ...

    def get_owner_preferences(self, owner_id: str) -> NotificationPreferences: ...

    def mark_reminder_sent(
        self, loan_id: str, at: datetime, cooldown_cutoff: datetime
    ) -> bool: ...

    def mark_reminders_sent_batch(
        self, loan_ids: Sequence[str], at: datetime, cooldown_cutoff: datetime
    ) -> bool: ...


class SqlReminderStore:
    """ReminderStore backed by the SQLAlchemy database."""

    def __init__(self, db: Database):
        self.db = db
        self.preferences = PreferencesManager(db)

    def _candidates(self, *criteria) -> list[ReminderCandidate]:
        stmt = (
            select(
                Loan.id,
                Loan.owner_id,
                Owner.email,
                Book.title,
                Book.author,
                Loan.borrower_name,
                Loan.lent_at,
                Loan.due_at,
                Loan.last_reminder_sent_at,
            )
            .join(Owner, Loan.owner_id == Owner.id)
            .join(Book, Loan.book_id == Book.id)
            .where(Loan.returned_at.is_(None), Loan.due_at.is_not(None), *criteria)
            .order_by(Loan.owner_id, Loan.due_at)
        )
        try:
            with self.db.get_session() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise ReminderStoreError(f"loan query failed: {exc}") from exc

        return [
            ReminderCandidate(
                loan_id=row[0],
                owner_id=row[1],
                owner_email=row[2],
                book_title=row[3],
                book_author=row[4],
                borrower_name=row[5],
                lent_at=row[6],
                due_at=row[7],
                last_reminder_sent_at=row[8],
            )
            for row in rows
        ]

    def list_active_loans_due_on(self, day: date) -> list[ReminderCandidate]:
        """Active loans whose due date falls on ``day``."""
        start = start_of_day(day)
        return self._candidates(Loan.due_at >= start, Loan.due_at < start + timedelta(days=1))

    def list_active_overdue_loans(self, as_of: date) -> list[ReminderCandidate]:
        """Active loans whose due date is strictly before ``as_of``."""
        return self._candidates(Loan.due_at < start_of_day(as_of))

    def get_owner_preferences(self, owner_id: str) -> NotificationPreferences:
        try:
            return self.preferences.get_preferences(owner_id)
        except SQLAlchemyError as exc:
            raise ReminderStoreError(f"preferences lookup failed: {exc}") from exc

    def _guarded_update(self, loan_ids: Sequence[str], at: datetime, cooldown_cutoff: datetime):
        # Re-check the selection guards at write time so a concurrent sweep
        # that already reminded a loan wins.
        return (
            update(Loan)
            .where(
                Loan.id.in_(list(loan_ids)),
                Loan.returned_at.is_(None),
                Loan.lent_at <= at,
                or_(
                    Loan.last_reminder_sent_at.is_(None),
                    Loan.last_reminder_sent_at < cooldown_cutoff,
                ),
            )
            .values(last_reminder_sent_at=at)
            .execution_options(synchronize_session=False)
        )

    def mark_reminder_sent(self, loan_id: str, at: datetime, cooldown_cutoff: datetime) -> bool:
        """Record a reminder for one loan.

        Returns:
            True if the loan was updated, False if the guard excluded it
        """
        try:
            with self.db.get_session() as session:
                result = session.execute(self._guarded_update([loan_id], at, cooldown_cutoff))
                return result.rowcount == 1
        except SQLAlchemyError as exc:
            raise ReminderStoreError(f"marking loan {loan_id} failed: {exc}") from exc

    def mark_reminders_sent_batch(
        self, loan_ids: Sequence[str], at: datetime, cooldown_cutoff: datetime
    ) -> bool:
        """Record a reminder for every loan in one transaction.

        Either the whole batch is committed or, on a database error, nothing
        is. Loans excluded by the guard already carry a reminder inside the
        cooldown window.
        """
        loan_ids = list(loan_ids)
        if not loan_ids:
            return True
        try:
            with self.db.get_session() as session:
                result = session.execute(self._guarded_update(loan_ids, at, cooldown_cutoff))
                updated = result.rowcount
        except SQLAlchemyError as exc:
            raise ReminderStoreError(f"batch marking of {len(loan_ids)} loans failed: {exc}") from exc

        if updated != len(loan_ids):
            logger.debug(
                "Batch mark updated %d of %d loans; the rest were already reminded",
                updated,
                len(loan_ids),
            )
        return True
