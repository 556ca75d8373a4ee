"""Service for projecting recurring charges forward, spotting shortfalls and forecasting cash flow."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from cashcast.models.account import Account, AccountType
from cashcast.models.recurring import RecurringItem, Frequency, FREQUENCY_DAYS
from cashcast.schemas.projection import (
    ProjectedExpense,
    Shortfall,
    ProjectionSummary,
    CashFlowForecast,
)

logger = logging.getLogger(__name__)


def _interval_days(frequency) -> Optional[int]:
    try:
        return FREQUENCY_DAYS[Frequency(frequency)]
    except ValueError:
        return None


def project_item(item: RecurringItem, today: date, end_date: date) -> List[ProjectedExpense]:
    """
    Future occurrences of one recurring item between today and end_date.

    A start date already in the past is fast-forwarded by whole intervals,
    which repairs items whose account has not synced for a while.
    """
    interval_days = _interval_days(item.frequency)
    if not interval_days:
        logger.warning(f"Recurring item {item.id} has unknown frequency {item.frequency!r}")
        return []
    interval = timedelta(days=interval_days)

    next_date = item.next_projected_date
    if next_date is None and item.last_date is not None:
        next_date = item.last_date + interval
    if next_date is None:
        return []

    while next_date < today:
        next_date += interval

    occurrences = []
    while next_date <= end_date:
        occurrences.append(ProjectedExpense(
            date=next_date,
            name=item.name,
            amount=item.amount,
            account_id=item.account_id,
        ))
        next_date += interval

    return occurrences


def get_projections(
    db: Session,
    days: int = 90,
    today: Optional[date] = None
) -> List[ProjectedExpense]:
    """Project every active recurring item over the next `days` days, sorted by date."""
    if today is None:
        today = date.today()
    end_date = today + timedelta(days=days)

    items = db.query(RecurringItem).filter(
        RecurringItem.is_active == True  # noqa: E712
    ).all()

    projections: List[ProjectedExpense] = []
    for item in items:
        projections.extend(project_item(item, today, end_date))

    projections.sort(key=lambda p: p.date)
    return projections


def _balance(account: Optional[Account]) -> Decimal:
    """Available balance, falling back to current balance."""
    if account is None:
        return Decimal("0")
    if account.available_balance is not None:
        return Decimal(account.available_balance)
    if account.current_balance is not None:
        return Decimal(account.current_balance)
    return Decimal("0")


def find_shortfalls(
    projections: List[ProjectedExpense],
    accounts: Dict[str, Account]
) -> List[Shortfall]:
    """Flag accounts whose projected outflow exceeds their balance."""
    outflows: Dict[str, Decimal] = {}
    for p in projections:
        outflows[p.account_id] = outflows.get(p.account_id, Decimal("0")) + p.amount

    shortfalls = []
    for account_id, outflow in outflows.items():
        if outflow == 0:
            continue
        account = accounts.get(account_id)
        available = _balance(account)
        if outflow > available:
            shortfalls.append(Shortfall(
                account_id=account_id,
                account_name=account.name if account else "Unknown",
                shortfall=outflow - available,
            ))

    return shortfalls


def get_projection_summary(
    db: Session,
    days: int = 90,
    today: Optional[date] = None
) -> ProjectionSummary:
    """Projections over the horizon with their total and per-account shortfalls."""
    projections = get_projections(db, days, today)

    account_ids = {p.account_id for p in projections}
    accounts: Dict[str, Account] = {}
    if account_ids:
        accounts = {
            a.id: a for a in db.query(Account).filter(Account.id.in_(account_ids)).all()
        }

    shortfalls = find_shortfalls(projections, accounts)
    total_projected = sum((p.amount for p in projections), Decimal("0"))

    if shortfalls:
        logger.info(f"{len(shortfalls)} account(s) projected to fall short within {days} days")

    return ProjectionSummary(
        projections=projections,
        total_projected=total_projected,
        shortfalls=shortfalls,
    )


NON_CASH_ACCOUNT_TYPES = (AccountType.credit, AccountType.loan)

FORECAST_HORIZONS = (30, 60, 90)


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


def get_cash_flow_forecast(
    db: Session,
    today: Optional[date] = None
) -> CashFlowForecast:
    """
    Cash on hand against projected recurring outflows at 30, 60 and 90 days.

    Shortfalls and the coverage flag come from the 30 day window.
    """
    if today is None:
        today = date.today()

    cash_accounts = db.query(Account).filter(
        Account.is_active == True,  # noqa: E712
        Account.account_type.notin_(NON_CASH_ACCOUNT_TYPES)
    ).all()
    total_available = sum((_balance(a) for a in cash_accounts), Decimal("0"))

    summaries = {
        days: get_projection_summary(db, days, today) for days in FORECAST_HORIZONS
    }
    outflow_30 = summaries[30].total_projected
    outflow_60 = summaries[60].total_projected
    outflow_90 = summaries[90].total_projected
    shortfalls = summaries[30].shortfalls
    can_cover = not shortfalls

    summary = (
        f"You have {_money(total_available)} available across cash accounts. "
        f"Recurring charges total {_money(outflow_30)} over the next 30 days, "
        f"{_money(outflow_60)} over 60 days and {_money(outflow_90)} over 90 days."
    )
    if can_cover:
        summary += " Every account covers its next 30 days of recurring charges."
    else:
        names = ", ".join(
            f"{s.account_name} (short {_money(s.shortfall)})" for s in shortfalls
        )
        summary += f" Accounts that cannot cover the next 30 days: {names}."

    logger.info(
        f"Forecast: available={total_available} outflow_30={outflow_30} "
        f"shortfalls={len(shortfalls)}"
    )

    return CashFlowForecast(
        total_available=total_available,
        projected_outflows_30_days=outflow_30,
        projected_outflows_60_days=outflow_60,
        projected_outflows_90_days=outflow_90,
        shortfalls=shortfalls,
        can_cover_30_days=can_cover,
        summary=summary,
    )
