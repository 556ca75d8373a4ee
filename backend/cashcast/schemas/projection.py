"""
Projection schemas.
"""

from pydantic import BaseModel
from typing import List
from datetime import date
from decimal import Decimal


class ProjectedExpense(BaseModel):
    date: date
    name: str
    amount: Decimal
    account_id: str


class Shortfall(BaseModel):
    account_id: str
    account_name: str
    shortfall: Decimal


class ProjectionSummary(BaseModel):
    projections: List[ProjectedExpense]
    total_projected: Decimal
    shortfalls: List[Shortfall]


class CashFlowForecast(BaseModel):
    total_available: Decimal
    projected_outflows_30_days: Decimal
    projected_outflows_60_days: Decimal
    projected_outflows_90_days: Decimal
    shortfalls: List[Shortfall]
    can_cover_30_days: bool
    summary: str
