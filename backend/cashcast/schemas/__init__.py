"""
Pydantic schemas package.
"""

from cashcast.schemas.account import (
    AccountBase,
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    AccountList,
)
from cashcast.schemas.transaction import (
    TransactionBase,
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionListResponse,
    TransactionSync,
    TransactionSyncResponse,
)
from cashcast.schemas.recurring import (
    RecurringItemResponse,
    RecurringItemUpdate,
    DetectionResponse,
    RecurringExpenseRow,
    RecurringExpensesResponse,
    RecurringAuditItem,
    RecurringAuditResponse,
)
from cashcast.schemas.projection import (
    ProjectedExpense,
    Shortfall,
    ProjectionSummary,
    CashFlowForecast,
)

__all__ = [
    "AccountBase",
    "AccountCreate",
    "AccountUpdate",
    "AccountResponse",
    "AccountList",
    "TransactionBase",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionResponse",
    "TransactionListResponse",
    "TransactionSync",
    "TransactionSyncResponse",
    "RecurringItemResponse",
    "RecurringItemUpdate",
    "DetectionResponse",
    "RecurringExpenseRow",
    "RecurringExpensesResponse",
    "RecurringAuditItem",
    "RecurringAuditResponse",
    "ProjectedExpense",
    "Shortfall",
    "ProjectionSummary",
    "CashFlowForecast",
]
