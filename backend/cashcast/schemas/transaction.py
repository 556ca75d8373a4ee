"""
Transaction schemas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt
from datetime import date, datetime
from decimal import Decimal


class TransactionBase(BaseModel):
    date: date
    amount: Decimal  # Positive = outflow
    name: str = Field(..., min_length=1, max_length=255)
    merchant_name: Optional[str] = None
    pending: bool = False


class TransactionCreate(TransactionBase):
    account_id: str


class TransactionUpdate(BaseModel):
    """Fields the bank sync may revise on an existing transaction."""
    date: Optional[dt.date] = None
    amount: Optional[Decimal] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    merchant_name: Optional[str] = None
    pending: Optional[bool] = None


class TransactionResponse(TransactionBase):
    id: str
    account_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    total: int
    page: int
    pages: int


class TransactionSync(BaseModel):
    """A batch of transactions pulled for one account by a bank sync."""
    account_id: str
    transactions: List[TransactionBase]


class TransactionSyncResponse(BaseModel):
    added: int
    recurring_items_found: int
