"""Pydantic schemas for recurring items."""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date, datetime
from decimal import Decimal

from cashcast.models.recurring import Frequency


class RecurringItemResponse(BaseModel):
    id: str
    account_id: str
    name: str
    merchant_name: Optional[str] = None
    amount: Decimal
    frequency: Frequency
    last_date: Optional[date] = None
    next_projected_date: Optional[date] = None
    is_active: bool
    is_user_confirmed: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RecurringItemUpdate(BaseModel):
    """User edits. Detection never overwrites is_active or is_user_confirmed."""
    is_active: Optional[bool] = None
    is_user_confirmed: Optional[bool] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0)
    frequency: Optional[Frequency] = None


class DetectionResponse(BaseModel):
    """Response from a detection pass."""
    items_by_account: Dict[str, int]
    total_found: int


class RecurringExpenseRow(BaseModel):
    id: str
    name: str
    merchant_name: Optional[str] = None
    amount: Decimal
    frequency: Frequency
    last_date: Optional[date] = None
    next_projected_date: Optional[date] = None
    account_name: str
    is_user_confirmed: bool


class RecurringExpensesResponse(BaseModel):
    items: List[RecurringExpenseRow]
    total_monthly_estimate: Decimal


class RecurringAuditItem(BaseModel):
    id: str
    name: str
    merchant_name: Optional[str] = None
    amount: Decimal
    frequency: Frequency
    last_date: Optional[date] = None
    days_since_last_seen: Optional[int] = None
    flagged: bool
    reason: str


class RecurringAuditResponse(BaseModel):
    items: List[RecurringAuditItem]
    flagged_count: int
    monthly_at_risk: Decimal
    summary: str
