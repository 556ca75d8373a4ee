"""
Transaction API endpoints.

Transactions arrive from the bank sync; these endpoints let it write and
revise them, and let clients browse them.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional
from datetime import date

from cashcast.dependencies import get_db
from cashcast.models.account import Account
from cashcast.models.transaction import Transaction
from cashcast.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
    TransactionListResponse,
    TransactionSync,
    TransactionSyncResponse,
)
from cashcast.services import recurring_service
from cashcast.services.recurring_service import RecurringDetectionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    account_id: Optional[str] = None,
    pending: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List transactions with filtering and pagination"""
    query = db.query(Transaction)

    if account_id:
        query = query.filter(Transaction.account_id == account_id)
    if pending is not None:
        query = query.filter(Transaction.pending == pending)
    if start_date:
        query = query.filter(Transaction.date >= start_date)
    if end_date:
        query = query.filter(Transaction.date <= end_date)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Transaction.name.ilike(search_term),
                Transaction.merchant_name.ilike(search_term)
            )
        )

    total = query.count()

    query = query.order_by(Transaction.date.desc())
    query = query.offset((page - 1) * per_page).limit(per_page)

    transactions = query.all()
    pages = (total + per_page - 1) // per_page

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        total=total,
        page=page,
        pages=pages
    )


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    data: TransactionCreate,
    db: Session = Depends(get_db)
):
    """Record a synced transaction"""
    account = db.query(Account).filter(Account.id == data.account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    transaction = Transaction(**data.model_dump())
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return TransactionResponse.model_validate(transaction)


@router.post("/sync", response_model=TransactionSyncResponse)
def sync_transactions(
    data: TransactionSync,
    db: Session = Depends(get_db)
):
    """
    Store a batch of synced transactions for one account, then rerun
    recurring detection on that account.
    """
    account = db.query(Account).filter(Account.id == data.account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    for item in data.transactions:
        db.add(Transaction(account_id=account.id, **item.model_dump()))
    db.commit()
    logger.info(f"Synced {len(data.transactions)} transactions for account {account.id}")

    try:
        items = recurring_service.detect_recurring_for_account(db, account.id)
    except RecurringDetectionError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return TransactionSyncResponse(
        added=len(data.transactions),
        recurring_items_found=len(items)
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    db: Session = Depends(get_db)
):
    """Get a single transaction"""
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionResponse.model_validate(transaction)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    update: TransactionUpdate,
    db: Session = Depends(get_db)
):
    """Apply a revision from the bank sync"""
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    update_data = update.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(transaction, field, value)

    db.commit()
    db.refresh(transaction)

    return TransactionResponse.model_validate(transaction)
