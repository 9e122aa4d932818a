"""SQLite database operations.

Handles database connection, session management, and owner/book CRUD.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base, Book, Owner
from .schemas import BookCreate, OwnerCreate


class Database:
    """Database connection and operations manager."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses the
                     configured BOOKLEND_DB_PATH.
        """
        if db_path is None:
            from ..config import get_config

            db_path = str(get_config().db_path)

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        # For in-memory databases, use StaticPool so all sessions share
        # the same connection
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self._ensure_directory()
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        # Import feature models to register them with Base
        from ..lending.models import Loan  # noqa: F401
        from ..settings.models import OwnerPreferences  # noqa: F401

        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all database tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ========================================================================
    # Owner Operations
    # ========================================================================

    def create_owner(self, data: OwnerCreate) -> Owner:
        """Create a new owner."""
        with self.get_session() as session:
            existing = session.execute(
                select(Owner).where(Owner.email == data.email)
            ).scalar_one_or_none()
            if existing:
                raise ValueError(f"Owner with email {data.email} already exists")

            owner = Owner(name=data.name, email=data.email)
            session.add(owner)
            session.commit()
            session.refresh(owner)
            session.expunge(owner)
            return owner

    def get_owner(self, owner_id: str) -> Optional[Owner]:
        """Get an owner by ID."""
        with self.get_session() as session:
            owner = session.get(Owner, owner_id)
            if owner:
                session.expunge(owner)
            return owner

    def list_owners(self) -> list[Owner]:
        """List all owners ordered by name."""
        with self.get_session() as session:
            owners = session.execute(select(Owner).order_by(Owner.name)).scalars().all()
            for owner in owners:
                session.expunge(owner)
            return list(owners)

    # ========================================================================
    # Book Operations
    # ========================================================================

    def create_book(self, data: BookCreate) -> Book:
        """Create a new book record owned by ``data.owner_id``."""
        with self.get_session() as session:
            if session.get(Owner, data.owner_id) is None:
                raise ValueError("Owner not found")

            book = Book(
                owner_id=data.owner_id,
                title=data.title,
                author=data.author,
                isbn=data.isbn,
            )
            session.add(book)
            session.commit()
            session.refresh(book)
            session.expunge(book)
            return book

    def get_book(self, book_id: str) -> Optional[Book]:
        """Get a book by ID."""
        with self.get_session() as session:
            book = session.get(Book, book_id)
            if book:
                session.expunge(book)
            return book

    def list_books(self, owner_id: Optional[str] = None) -> list[Book]:
        """List books, optionally for a single owner."""
        with self.get_session() as session:
            stmt = select(Book).order_by(Book.title)
            if owner_id:
                stmt = stmt.where(Book.owner_id == owner_id)
            books = session.execute(stmt).scalars().all()
            for book in books:
                session.expunge(book)
            return list(books)


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
