"""
Account API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cashcast.dependencies import get_db
from cashcast.models import Account
from cashcast.schemas.account import (
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    AccountList,
)

router = APIRouter(prefix="/accounts", tags=["accounts"])

NULLABLE_FIELDS = {"current_balance", "available_balance"}


@router.get("", response_model=AccountList)
def list_accounts(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """List all active accounts."""
    query = db.query(Account).filter(Account.is_active == True)  # noqa: E712
    accounts = query.order_by(Account.name).offset(skip).limit(limit).all()

    return AccountList(
        items=[AccountResponse.model_validate(a) for a in accounts],
        total=query.count()
    )


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    account: AccountCreate,
    db: Session = Depends(get_db)
):
    """Create a new account."""
    db_account = Account(**account.model_dump())
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    return db_account


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific account."""
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    account_update: AccountUpdate,
    db: Session = Depends(get_db)
):
    """Update an account, e.g. with fresh balances from a sync."""
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    for field, value in account_update.model_dump(exclude_unset=True).items():
        # Balances may be cleared; the other columns are NOT NULL
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(account, field, value)

    db.commit()
    db.refresh(account)
    return account


@router.delete("/{account_id}", status_code=204)
def delete_account(
    account_id: str,
    db: Session = Depends(get_db)
):
    """Soft delete an account (set is_active to False)."""
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    account.is_active = False
    db.commit()
    return None
