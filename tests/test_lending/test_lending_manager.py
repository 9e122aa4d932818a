"""Tests for LendingManager."""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from booklend.exceptions import LendingError
from booklend.lending.schemas import LoanCreate, LoanResponse, LoanStatus
from booklend.utils.clock import utcnow


class TestLoanCreate:
    """Tests for LoanCreate validation."""

    def test_borrower_name_is_stripped(self):
        """Surrounding whitespace is removed from the borrower."""
        data = LoanCreate(book_id="b", owner_id="o", borrower_name="  Dana  ")
        assert data.borrower_name == "Dana"

    def test_blank_borrower_rejected(self):
        """A borrower name is required."""
        with pytest.raises(ValidationError):
            LoanCreate(book_id="b", owner_id="o", borrower_name="   ")

    def test_due_before_lent_rejected(self):
        """A due date earlier than the lend date is invalid."""
        with pytest.raises(ValidationError):
            LoanCreate(
                book_id="b",
                owner_id="o",
                borrower_name="Dana",
                lent_at=datetime(2024, 3, 10, 8, 0),
                due_date=date(2024, 3, 9),
            )

    def test_future_lent_at_rejected(self):
        """A loan cannot be recorded as starting later than now."""
        with pytest.raises(ValidationError, match="future"):
            LoanCreate(
                book_id="b",
                owner_id="o",
                borrower_name="Dana",
                lent_at=utcnow() + timedelta(days=1),
            )

    def test_aware_lent_at_compared_in_utc(self):
        """Aware datetimes are compared after conversion to UTC."""
        past = datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)
        data = LoanCreate(book_id="b", owner_id="o", borrower_name="Dana", lent_at=past)
        assert data.lent_at == past

    def test_due_same_day_as_lent_allowed(self):
        """Lending and due on the same day is fine."""
        data = LoanCreate(
            book_id="b",
            owner_id="o",
            borrower_name="Dana",
            lent_at=datetime(2024, 3, 10, 8, 0),
            due_date=date(2024, 3, 10),
        )
        assert data.due_date == date(2024, 3, 10)


class TestCreateLoan:
    """Tests for lending a book."""

    def test_create_loan(self, lending, owner, make_book):
        """A new loan is active and its due date is stored as midnight."""
        book = make_book(owner.id, title="Dune")

        loan = lending.create_loan(
            LoanCreate(
                book_id=book.id,
                owner_id=owner.id,
                borrower_name="Carol",
                lent_at=datetime(2024, 3, 1, 15, 30),
                due_date=date(2024, 3, 20),
            )
        )

        assert loan.id is not None
        assert loan.is_active
        assert loan.borrower_name == "Carol"
        assert loan.lent_at == datetime(2024, 3, 1, 15, 30)
        assert loan.due_at == datetime(2024, 3, 20, 0, 0)
        assert loan.last_reminder_sent_at is None

    def test_lent_at_defaults_to_now(self, lending, owner, make_book):
        """Without lent_at the loan starts now."""
        book = make_book(owner.id)
        before = utcnow() - timedelta(seconds=5)

        loan = lending.create_loan(
            LoanCreate(book_id=book.id, owner_id=owner.id, borrower_name="Carol")
        )

        assert loan.lent_at >= before
        assert loan.due_at is None

    def test_missing_book(self, lending, owner):
        """Lending an unknown book fails."""
        with pytest.raises(LendingError, match="Book not found"):
            lending.create_loan(
                LoanCreate(book_id="nope", owner_id=owner.id, borrower_name="Carol")
            )

    def test_book_of_another_owner(self, lending, owner, other_owner, make_book):
        """Only the book's owner may lend it."""
        book = make_book(owner.id)

        with pytest.raises(LendingError, match="different owner"):
            lending.create_loan(
                LoanCreate(book_id=book.id, owner_id=other_owner.id, borrower_name="Carol")
            )

    def test_book_already_lent(self, lending, owner, make_book):
        """A book can have at most one active loan."""
        book = make_book(owner.id)
        data = LoanCreate(book_id=book.id, owner_id=owner.id, borrower_name="Carol")
        lending.create_loan(data)

        with pytest.raises(LendingError, match="already lent out"):
            lending.create_loan(data)

    def test_lend_again_after_return(self, lending, owner, make_book):
        """Returning a book frees it for the next loan."""
        book = make_book(owner.id)
        data = LoanCreate(book_id=book.id, owner_id=owner.id, borrower_name="Carol")
        first = lending.create_loan(data)
        lending.return_loan(first.id)

        second = lending.create_loan(data)

        assert second.id != first.id
        assert second.is_active


class TestReturnLoan:
    """Tests for returning a book."""

    def test_return_loan(self, lending, owner, make_loan):
        """Returning closes the loan."""
        loan = make_loan(owner.id, date(2024, 3, 20))

        returned = lending.return_loan(loan.id, returned_at=datetime(2024, 3, 18, 10, 0))

        assert returned.returned_at == datetime(2024, 3, 18, 10, 0)
        assert not returned.is_active
        assert not returned.is_overdue

    def test_return_unknown_loan(self, lending):
        """Unknown loans return None."""
        assert lending.return_loan("missing") is None

    def test_double_return(self, lending, owner, make_loan):
        """A closed loan stays closed."""
        loan = make_loan(owner.id, date(2024, 3, 20))
        lending.return_loan(loan.id)

        with pytest.raises(LendingError, match="already been returned"):
            lending.return_loan(loan.id)


class TestListLoans:
    """Tests for listing and filtering loans."""

    def test_filters(self, lending, owner, other_owner, make_loan):
        """Owner, active and overdue filters combine."""
        overdue = make_loan(owner.id, date(2020, 1, 10), lent_at=datetime(2020, 1, 1))
        future = make_loan(owner.id, date.today() + timedelta(days=30))
        closed = make_loan(owner.id, date(2020, 2, 10), lent_at=datetime(2020, 2, 1))
        lending.return_loan(closed.id)
        make_loan(other_owner.id, date(2020, 1, 10), lent_at=datetime(2020, 1, 1))

        all_ids = {loan.id for loan in lending.list_loans(owner_id=owner.id)}
        active_ids = {loan.id for loan in lending.list_loans(owner_id=owner.id, active_only=True)}
        overdue_ids = {loan.id for loan in lending.list_loans(owner_id=owner.id, overdue_only=True)}

        assert all_ids == {overdue.id, future.id, closed.id}
        assert active_ids == {overdue.id, future.id}
        assert overdue_ids == {overdue.id}

    def test_history_for_book(self, lending, owner, make_book):
        """Every loan of a book is kept, newest first."""
        book = make_book(owner.id)
        first = lending.create_loan(
            LoanCreate(
                book_id=book.id,
                owner_id=owner.id,
                borrower_name="Carol",
                lent_at=datetime(2024, 1, 1),
            )
        )
        lending.return_loan(first.id, returned_at=datetime(2024, 1, 15))
        second = lending.create_loan(
            LoanCreate(
                book_id=book.id,
                owner_id=owner.id,
                borrower_name="Dan",
                lent_at=datetime(2024, 2, 1),
            )
        )

        history = lending.get_loan_history_for_book(book.id)

        assert [loan.id for loan in history] == [second.id, first.id]


class TestStats:
    """Tests for lending statistics."""

    def test_stats(self, lending, owner, other_owner, make_loan):
        """Counts cover total, lent, overdue and returned loans."""
        make_loan(owner.id, date(2020, 1, 10), lent_at=datetime(2020, 1, 1))
        make_loan(owner.id, date.today() + timedelta(days=30))
        closed = make_loan(owner.id, None)
        lending.return_loan(closed.id)
        make_loan(other_owner.id, None)

        stats = lending.get_stats(owner_id=owner.id)

        assert stats.total_loans == 3
        assert stats.currently_lent == 2
        assert stats.overdue == 1
        assert stats.returned == 1
        assert lending.get_stats().total_loans == 4


class TestLoanResponse:
    """Tests for LoanResponse."""

    def test_from_loan(self, lending, owner, make_loan):
        """Responses carry status and overdue information."""
        loan = make_loan(owner.id, date(2020, 1, 10), lent_at=datetime(2020, 1, 1))

        response = LoanResponse.from_loan(loan, book_title="Dune")

        assert response.status == LoanStatus.ACTIVE
        assert response.is_overdue
        assert response.days_overdue > 0
        assert response.book_title == "Dune"
