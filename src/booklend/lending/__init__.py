"""Book lending module.

Provides functionality for:
- Recording books lent to others
- Returning loans
- Due date and overdue tracking
"""

from .manager import LendingManager
from .models import Loan
from .schemas import LendingStats, LoanCreate, LoanResponse, LoanStatus

__all__ = [
    "LendingManager",
    "Loan",
    "LoanCreate",
    "LoanResponse",
    "LoanStatus",
    "LendingStats",
]
