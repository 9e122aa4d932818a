"""Pytest configuration and shared fixtures.

Provides an in-memory database, sample owners and books, a loan factory
and a recording notifier for reminder tests.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from booklend.config import Config, reset_config
from booklend.db.schemas import BookCreate, OwnerCreate
from booklend.db.sqlite import Database, reset_db
from booklend.lending.manager import LendingManager
from booklend.lending.schemas import LoanCreate
from booklend.notify.schemas import DeliveryResult

# Fixed sweep time used throughout the reminder tests
NOW = datetime(2024, 3, 15, 9, 0, 0)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db():
    """Create an in-memory database for testing."""
    reset_db()
    reset_config()
    database = Database(":memory:")
    database.create_tables()
    yield database
    reset_db()


@pytest.fixture
def lending(db):
    """Create a LendingManager with test database."""
    return LendingManager(db)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def owner(db):
    """Create the primary owner."""
    return db.create_owner(OwnerCreate(name="Alice Reader", email="alice@example.com"))


@pytest.fixture
def other_owner(db):
    """Create a second owner."""
    return db.create_owner(OwnerCreate(name="Bob Shelf", email="bob@example.com"))


@pytest.fixture
def make_book(db):
    """Factory creating a book for an owner."""
    counter = {"n": 0}

    def _make(owner_id: str, title: Optional[str] = None, author: str = "Some Author"):
        counter["n"] += 1
        return db.create_book(
            BookCreate(owner_id=owner_id, title=title or f"Book {counter['n']}", author=author)
        )

    return _make


@pytest.fixture
def make_loan(lending, make_book):
    """Factory lending a fresh book; returns the Loan."""

    def _make(
        owner_id: str,
        due_date: Optional[date],
        borrower: str = "Carol",
        lent_at: datetime = datetime(2024, 1, 1, 12, 0),
        title: Optional[str] = None,
    ):
        book = make_book(owner_id, title=title)
        return lending.create_loan(
            LoanCreate(
                book_id=book.id,
                owner_id=owner_id,
                borrower_name=borrower,
                lent_at=lent_at,
                due_date=due_date,
            )
        )

    return _make


# ============================================================================
# Config and Notifier Fixtures
# ============================================================================


@pytest.fixture
def config(tmp_path):
    """Config with a throwaway database path and SMTP credentials."""
    return replace(
        Config.from_env(),
        db_path=tmp_path / "books.db",
        smtp_host="smtp.test",
        smtp_port=2525,
        smtp_username="user",
        smtp_password="secret",
        smtp_from_email="noreply@booklib.test",
        smtp_from_name="BookLib",
        smtp_use_tls=True,
        reminder_cooldown_hours=24,
        upcoming_lead_days=3,
        sweep_hour=8,
        sweep_minute=0,
        sweep_on_startup=True,
    )


class RecordingNotifier:
    """Notifier fake that records calls and fails for chosen addresses."""

    def __init__(self, fail_for: Optional[set] = None, configured: bool = True):
        self.fail_for = set(fail_for or ())
        self.configured = configured
        self.singles = []
        self.digests = []

    def is_configured(self) -> bool:
        return self.configured

    def _result(self, address: str) -> DeliveryResult:
        if not self.configured:
            return DeliveryResult.failure("not configured")
        if address in self.fail_for:
            return DeliveryResult.failure("smtp down")
        return DeliveryResult.success()

    def send_single(self, address, kind, notice):
        self.singles.append((address, kind, notice))
        return self._result(address)

    def send_digest(self, address, items):
        self.digests.append((address, list(items)))
        return self._result(address)


@pytest.fixture
def notifier():
    """A notifier that accepts every message."""
    return RecordingNotifier()


@pytest.fixture
def notifier_factory():
    """Build notifiers with specific failure behaviour."""
    return RecordingNotifier
