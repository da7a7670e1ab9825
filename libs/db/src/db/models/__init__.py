"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the finance-tracker models used by ``finance_tracker``.
"""

from .finance import Base, FtBudget, FtTransaction, FtUser

__all__ = [
    "Base",
    "FtBudget",
    "FtTransaction",
    "FtUser",
]
