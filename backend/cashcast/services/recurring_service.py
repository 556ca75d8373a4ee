"""Service for recurring transaction detection and management."""

import logging
import re
import uuid
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashcast.models.account import Account
from cashcast.models.recurring import RecurringItem, Frequency, FREQUENCY_DAYS
from cashcast.models.transaction import Transaction

logger = logging.getLogger(__name__)

# A merchant needs this many charges before it can be called recurring
MIN_OCCURRENCES = 3

# Max relative deviation of any single charge from the group mean
AMOUNT_TOLERANCE = Decimal("0.05")

# Allowed distance (days) of every gap from the cadence's nominal interval
GAP_TOLERANCE_DAYS = {
    Frequency.weekly: 1,
    Frequency.biweekly: 2,
    Frequency.monthly: 3,
    Frequency.annually: 10,
}

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


class FrequencyMatch(NamedTuple):
    frequency: Frequency
    interval_days: int


class RecurringDetectionError(Exception):
    """
    Raised after a detection pass in which one or more upserts failed.

    `failures` maps account id to the merchant names whose writes were rolled back.
    """

    def __init__(self, failures: Dict[str, List[str]]):
        self.failures = failures
        details = "; ".join(
            f"{account_id}: {', '.join(merchants)}" for account_id, merchants in failures.items()
        )
        super().__init__(f"Recurring item upsert failed for {details}")


def normalize_merchant_name(name: str) -> str:
    """Lower-case, drop punctuation and collapse whitespace into a grouping key."""
    key = _NON_ALNUM.sub("", name.lower())
    return _WHITESPACE.sub(" ", key).strip()


def _candidate_frequency(mean_gap: float) -> Optional[Frequency]:
    """Pick the cadence bucket for an average gap, if any."""
    if mean_gap <= 10:
        return Frequency.weekly
    elif mean_gap <= 18:
        return Frequency.biweekly
    elif mean_gap <= 45:
        return Frequency.monthly
    elif 350 <= mean_gap <= 380:
        return Frequency.annually
    return None


def classify_frequency(dates: Sequence[date]) -> Optional[FrequencyMatch]:
    """
    Infer the cadence of a series of charge dates.

    The average gap selects a bucket, then every individual gap has to sit
    within that bucket's tolerance of the nominal interval. Returns None with
    fewer than three dates or when the spacing is irregular.
    """
    if len(dates) < 3:
        return None

    ordered = sorted(dates)
    gaps = [
        round((later - earlier).total_seconds() / 86400)
        for earlier, later in zip(ordered, ordered[1:])
    ]
    mean_gap = sum(gaps) / len(gaps)

    frequency = _candidate_frequency(mean_gap)
    if frequency is None:
        return None

    nominal = FREQUENCY_DAYS[frequency]
    tolerance = GAP_TOLERANCE_DAYS[frequency]
    if all(abs(gap - nominal) <= tolerance for gap in gaps):
        return FrequencyMatch(frequency, nominal)
    return None


def amounts_consistent(amounts: Sequence[Any]) -> bool:
    """Check every amount is within 5% of the group mean."""
    if len(amounts) < 2:
        return False

    values = [Decimal(str(a)) for a in amounts]
    mean = sum(values) / len(values)
    if mean == 0:
        return False

    return all(abs(v - mean) / abs(mean) <= AMOUNT_TOLERANCE for v in values)


def representative_amount(amounts: Sequence[Any]) -> Decimal:
    """Mean of the group's amounts, rounded to cents."""
    values = [Decimal(str(a)) for a in amounts]
    mean = sum(values) / len(values)
    return mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def group_transactions(transactions: Iterable[Transaction]) -> Dict[str, Dict[str, Any]]:
    """
    Group transactions by normalized merchant key.

    The display merchant name of a group is taken from the first transaction
    seen, so callers pass transactions most recent first.
    """
    groups: Dict[str, Dict[str, Any]] = {}

    for txn in transactions:
        merchant = txn.merchant_name or txn.name
        key = normalize_merchant_name(merchant)
        group = groups.get(key)
        if group is None:
            group = {"merchant_name": merchant, "amounts": [], "dates": []}
            groups[key] = group
        group["amounts"].append(txn.amount)
        group["dates"].append(txn.date)

    return groups


def upsert_recurring_item(
    db: Session,
    account_id: str,
    merchant_name: str,
    amount: Decimal,
    match: FrequencyMatch,
    last_date: date,
) -> RecurringItem:
    """
    Create or refresh the recurring item for (account, merchant).

    User-controlled state (is_active, is_user_confirmed, name) is never
    touched on update. The caller commits.
    """
    next_date = last_date + timedelta(days=match.interval_days)

    item = db.query(RecurringItem).filter(
        RecurringItem.account_id == account_id,
        RecurringItem.merchant_name == merchant_name,
    ).first()

    if item:
        item.amount = amount
        item.frequency = match.frequency
        item.last_date = last_date
        item.next_projected_date = next_date
    else:
        item = RecurringItem(
            id=str(uuid.uuid4()),
            account_id=account_id,
            name=merchant_name,
            merchant_name=merchant_name,
            amount=amount,
            frequency=match.frequency,
            last_date=last_date,
            next_projected_date=next_date,
            is_active=True,
            is_user_confirmed=False,
        )
        db.add(item)

    return item


def _run_detection(db: Session, account_id: str) -> Tuple[List[RecurringItem], List[str]]:
    transactions = db.query(Transaction).filter(
        Transaction.account_id == account_id,
        Transaction.pending == False,  # noqa: E712
    ).order_by(Transaction.date.desc()).all()

    items: List[RecurringItem] = []
    failed: List[str] = []

    for group in group_transactions(transactions).values():
        merchant = group["merchant_name"]

        if len(group["amounts"]) < MIN_OCCURRENCES:
            continue
        if not amounts_consistent(group["amounts"]):
            logger.debug(f"Skipping {merchant!r}: amounts vary too much")
            continue

        match = classify_frequency(group["dates"])
        if match is None:
            logger.debug(f"Skipping {merchant!r}: no cadence match")
            continue

        amount = representative_amount(group["amounts"])
        if amount <= 0:
            # Inflows (payroll, refunds) are not recurring charges
            continue

        try:
            item = upsert_recurring_item(
                db, account_id, merchant, amount, match, max(group["dates"])
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to upsert recurring item {merchant!r} for account {account_id}")
            failed.append(merchant)
            continue

        items.append(item)

    logger.info(
        f"Recurring detection for account {account_id}: "
        f"{len(transactions)} transactions, {len(items)} recurring items, {len(failed)} failures"
    )
    return items, failed


def detect_recurring_for_account(db: Session, account_id: str) -> List[RecurringItem]:
    """
    Run the detection pass over one account's settled transactions.

    Each merchant group is committed on its own so a failed write cannot
    block the others; failures are reported together once the pass is done.
    """
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise ValueError(f"Account {account_id} not found")

    items, failed = _run_detection(db, account_id)
    if failed:
        raise RecurringDetectionError({account_id: failed})
    return items


def detect_all_recurring(db: Session) -> Dict[str, int]:
    """Run detection for every active account, returning items found per account."""
    account_ids = [
        row.id for row in db.query(Account.id).filter(Account.is_active == True).all()  # noqa: E712
    ]

    found: Dict[str, int] = {}
    failures: Dict[str, List[str]] = {}
    for account_id in account_ids:
        items, failed = _run_detection(db, account_id)
        found[account_id] = len(items)
        if failed:
            failures[account_id] = failed

    if failures:
        raise RecurringDetectionError(failures)
    return found


def get_recurring_items(
    db: Session,
    include_inactive: bool = False,
    account_id: Optional[str] = None,
) -> List[RecurringItem]:
    """Get recurring items ordered by name."""
    query = db.query(RecurringItem)

    if not include_inactive:
        query = query.filter(RecurringItem.is_active == True)  # noqa: E712
    if account_id:
        query = query.filter(RecurringItem.account_id == account_id)

    return query.order_by(RecurringItem.name).all()


def update_recurring_item(db: Session, item_id: str, updates: Dict[str, Any]) -> RecurringItem:
    """
    Apply a user edit to a recurring item.

    Changing the frequency re-derives next_projected_date from last_date.
    """
    item = db.query(RecurringItem).filter(RecurringItem.id == item_id).first()
    if not item:
        raise ValueError(f"Recurring item {item_id} not found")

    updates = dict(updates)
    if updates.get("amount") is not None:
        amount = Decimal(str(updates["amount"])).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise ValueError("Amount must be positive")
        updates["amount"] = amount

    for field, value in updates.items():
        setattr(item, field, value)

    if "frequency" in updates and item.last_date is not None:
        interval = FREQUENCY_DAYS[Frequency(item.frequency)]
        item.next_projected_date = item.last_date + timedelta(days=interval)

    db.commit()
    db.refresh(item)
    return item
