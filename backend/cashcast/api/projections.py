"""
Projection API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from cashcast.config import settings
from cashcast.dependencies import get_db
from cashcast.schemas.projection import ProjectionSummary, CashFlowForecast
from cashcast.services import projection_service

router = APIRouter(prefix="/projections", tags=["projections"])


@router.get("/forecast", response_model=CashFlowForecast)
def get_forecast(db: Session = Depends(get_db)):
    """
    Cash on hand against recurring outflows at 30, 60 and 90 days.
    Returns: totals per horizon, 30 day shortfalls, can_cover_30_days, summary
    """
    return projection_service.get_cash_flow_forecast(db)


@router.get("", response_model=ProjectionSummary)
def get_projections(
    days: Optional[int] = Query(None, ge=1, le=settings.projection_max_days),
    db: Session = Depends(get_db)
):
    """
    Projected recurring charges over the next `days` days.
    Returns: projections, total_projected, shortfalls
    """
    if days is None:
        days = settings.projection_default_days
    return projection_service.get_projection_summary(db, days)
