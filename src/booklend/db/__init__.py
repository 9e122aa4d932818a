"""Database module for local SQLite storage."""

from .models import Base, Book, Owner
from .schemas import BookCreate, OwnerCreate
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Base",
    "Book",
    "Owner",
    "BookCreate",
    "OwnerCreate",
    "Database",
    "get_db",
    "reset_db",
]
