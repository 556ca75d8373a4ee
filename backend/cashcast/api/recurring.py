"""API endpoints for recurring item management and detection."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from cashcast.dependencies import get_db
from cashcast.models.recurring import RecurringItem
from cashcast.schemas.recurring import (
    RecurringItemResponse,
    RecurringItemUpdate,
    DetectionResponse,
    RecurringExpensesResponse,
    RecurringAuditResponse,
)
from cashcast.services import recurring_service, recurring_audit_service
from cashcast.services.recurring_service import RecurringDetectionError

router = APIRouter(prefix="/recurring", tags=["recurring"])


@router.get("", response_model=List[RecurringItemResponse])
def get_recurring_items(
    include_inactive: bool = Query(False),
    account_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Get all recurring items."""
    items = recurring_service.get_recurring_items(db, include_inactive, account_id)
    return [RecurringItemResponse.model_validate(item) for item in items]


@router.get("/summary", response_model=RecurringExpensesResponse)
def get_recurring_summary(db: Session = Depends(get_db)):
    """Active recurring items with a monthly-normalized total."""
    return recurring_audit_service.get_recurring_expenses(db)


@router.get("/audit", response_model=RecurringAuditResponse)
def audit_recurring(
    threshold_days: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Flag recurring items with no recent charge."""
    return recurring_audit_service.audit_recurring_expenses(db, threshold_days=threshold_days)


@router.post("/detect", response_model=DetectionResponse)
def detect_recurring(
    account_id: Optional[str] = Query(None, description="Limit detection to one account"),
    db: Session = Depends(get_db)
):
    """
    Run recurring detection and upsert the resulting items.
    Without account_id every active account is processed.
    """
    try:
        if account_id:
            items = recurring_service.detect_recurring_for_account(db, account_id)
            found = {account_id: len(items)}
        else:
            found = recurring_service.detect_all_recurring(db)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecurringDetectionError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return DetectionResponse(
        items_by_account=found,
        total_found=sum(found.values())
    )


@router.get("/{item_id}", response_model=RecurringItemResponse)
def get_recurring_item(
    item_id: str,
    db: Session = Depends(get_db)
):
    """Get a single recurring item."""
    item = db.query(RecurringItem).filter(RecurringItem.id == item_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Recurring item not found")
    return RecurringItemResponse.model_validate(item)


@router.patch("/{item_id}", response_model=RecurringItemResponse)
def update_recurring_item(
    item_id: str,
    update: RecurringItemUpdate,
    db: Session = Depends(get_db)
):
    """Update a recurring item (deactivate, confirm, rename, correct amount or cadence)."""
    updates = update.model_dump(exclude_unset=True, exclude_none=True)
    try:
        item = recurring_service.update_recurring_item(db, item_id, updates)
    except ValueError as e:
        status_code = 404 if "not found" in str(e) else 400
        raise HTTPException(status_code=status_code, detail=str(e))
    return RecurringItemResponse.model_validate(item)
