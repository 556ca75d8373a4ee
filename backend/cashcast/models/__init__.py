"""
Database models package.
"""

from cashcast.models.account import Account, AccountType
from cashcast.models.transaction import Transaction
from cashcast.models.recurring import RecurringItem, Frequency, FREQUENCY_DAYS

__all__ = [
    "Account",
    "AccountType",
    "Transaction",
    "RecurringItem",
    "Frequency",
    "FREQUENCY_DAYS",
]
