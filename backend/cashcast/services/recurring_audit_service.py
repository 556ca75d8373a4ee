"""Monthly totals and staleness audit over active recurring items."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from cashcast.config import settings
from cashcast.models.account import Account
from cashcast.models.recurring import RecurringItem, Frequency
from cashcast.schemas.recurring import (
    RecurringExpenseRow,
    RecurringExpensesResponse,
    RecurringAuditItem,
    RecurringAuditResponse,
)

CENTS = Decimal("0.01")


def to_monthly_amount(amount: Decimal, frequency: Frequency) -> Decimal:
    """Normalize a per-occurrence amount to a monthly figure."""
    amount = Decimal(amount)
    frequency = Frequency(frequency)
    if frequency == Frequency.weekly:
        return amount * 52 / 12
    elif frequency == Frequency.biweekly:
        return amount * 26 / 12
    elif frequency == Frequency.annually:
        return amount / 12
    return amount


def _active_items_with_account(db: Session):
    return db.query(RecurringItem, Account.name).join(
        Account, RecurringItem.account_id == Account.id
    ).filter(
        RecurringItem.is_active == True  # noqa: E712
    ).order_by(RecurringItem.name).all()


def get_recurring_expenses(db: Session) -> RecurringExpensesResponse:
    """Active recurring items with their estimated monthly cost."""
    rows = _active_items_with_account(db)

    items = [
        RecurringExpenseRow(
            id=item.id,
            name=item.name,
            merchant_name=item.merchant_name,
            amount=item.amount,
            frequency=item.frequency,
            last_date=item.last_date,
            next_projected_date=item.next_projected_date,
            account_name=account_name,
            is_user_confirmed=item.is_user_confirmed,
        )
        for item, account_name in rows
    ]

    total = sum((to_monthly_amount(i.amount, i.frequency) for i in items), Decimal("0"))
    return RecurringExpensesResponse(
        items=items,
        total_monthly_estimate=total.quantize(CENTS, rounding=ROUND_HALF_UP),
    )


def audit_recurring_expenses(
    db: Session,
    today: Optional[date] = None,
    threshold_days: Optional[int] = None
) -> RecurringAuditResponse:
    """
    Flag active recurring items that have not charged in a while.

    An item is flagged once `threshold_days` have passed since its last
    observed charge; these are likely cancelled or forgotten subscriptions.
    Flagged items sort first.
    """
    if today is None:
        today = date.today()
    if threshold_days is None:
        threshold_days = settings.audit_threshold_days

    items = []
    for item, _ in _active_items_with_account(db):
        days_since = (today - item.last_date).days if item.last_date else None
        flagged = days_since is not None and days_since >= threshold_days

        if flagged:
            reason = f"No charge in {days_since} days, consider cancelling if no longer needed"
        elif days_since is not None:
            reason = f"Last seen {days_since} days ago"
        else:
            reason = "No recent transaction history"

        items.append(RecurringAuditItem(
            id=item.id,
            name=item.name,
            merchant_name=item.merchant_name,
            amount=item.amount,
            frequency=item.frequency,
            last_date=item.last_date,
            days_since_last_seen=days_since,
            flagged=flagged,
            reason=reason,
        ))

    flagged_items = [i for i in items if i.flagged]
    monthly_at_risk = sum(
        (to_monthly_amount(i.amount, i.frequency) for i in flagged_items), Decimal("0")
    ).quantize(CENTS, rounding=ROUND_HALF_UP)

    summary = f"Found {len(items)} active recurring items."
    if flagged_items:
        summary += (
            f" {len(flagged_items)} have had no charges in {threshold_days}+ days"
            f" (about ${monthly_at_risk:.0f}/mo if cancelled)."
        )
    elif items:
        summary += " All have recent activity."

    # Stable sort keeps name order within each bucket
    items.sort(key=lambda i: not i.flagged)

    return RecurringAuditResponse(
        items=items,
        flagged_count=len(flagged_items),
        monthly_at_risk=monthly_at_risk,
        summary=summary,
    )
