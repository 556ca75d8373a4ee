"""
Seed script for demo data.

Inserts two accounts with several months of transactions (subscriptions,
a paycheck, noisy grocery spend) and runs recurring detection, so the
projection endpoints have something to show without a bank connection.
Idempotent: nothing happens if the demo checking account already exists.
"""

import logging
import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from cashcast.database import SessionLocal, init_db
from cashcast.models import Account, AccountType, Transaction
from cashcast.services.recurring_service import detect_all_recurring

logger = logging.getLogger(__name__)

DEMO_CHECKING_ID = "00000000-0000-4000-8000-000000000001"
DEMO_CARD_ID = "00000000-0000-4000-8000-000000000002"

# (account, name, merchant_name, amount, interval_days, occurrences, first_offset_days)
RECURRING_CHARGES = [
    (DEMO_CARD_ID, "NETFLIX.COM 866-579-7172", "Netflix", "15.49", 30, 6, 4),
    (DEMO_CARD_ID, "SPOTIFY USA", "Spotify", "10.99", 30, 6, 12),
    (DEMO_CARD_ID, "AMZN PRIME MEMBERSHIP", "Amazon Prime", "139.00", 365, 3, 40),
    (DEMO_CHECKING_ID, "CITY POWER & LIGHT AUTOPAY", "City Power", "84.20", 30, 6, 8),
    (DEMO_CHECKING_ID, "PLANET FITNESS CLUB FEES", "Planet Fitness", "24.99", 14, 12, 2),
    (DEMO_CHECKING_ID, "RENT PMT OAKWOOD APTS", None, "1450.00", 30, 6, 27),
    # Inflow: recurring in timing, never stored as a recurring charge
    (DEMO_CHECKING_ID, "ACME CORP PAYROLL", "Acme Corp", "-2150.00", 14, 12, 6),
]


def _seed_transactions(db: Session, today: date, rng: random.Random) -> int:
    count = 0
    for account_id, name, merchant, amount, interval, occurrences, offset in RECURRING_CHARGES:
        for i in range(occurrences):
            db.add(Transaction(
                account_id=account_id,
                name=name,
                merchant_name=merchant,
                amount=Decimal(amount),
                date=today - timedelta(days=offset + i * interval),
                pending=False,
            ))
            count += 1

    # Groceries: same merchant, amounts too variable to be a subscription
    for i in range(20):
        db.add(Transaction(
            account_id=DEMO_CARD_ID,
            name="WHOLE FOODS MKT #10234",
            merchant_name="Whole Foods",
            amount=Decimal(str(round(rng.uniform(35, 180), 2))),
            date=today - timedelta(days=3 + i * rng.randint(5, 11)),
            pending=False,
        ))
        count += 1

    # A pending charge is ignored by detection
    db.add(Transaction(
        account_id=DEMO_CARD_ID,
        name="NETFLIX.COM 866-579-7172",
        merchant_name="Netflix",
        amount=Decimal("15.49"),
        date=today,
        pending=True,
    ))
    return count + 1


def seed_demo_data(db: Session, today: Optional[date] = None) -> bool:
    """
    Insert the demo accounts and transactions, then run detection.
    Returns False if the demo data was already present.
    """
    if db.query(Account).filter(Account.id == DEMO_CHECKING_ID).first():
        logger.info("Demo data already seeded")
        return False

    if today is None:
        today = date.today()

    db.add_all([
        Account(
            id=DEMO_CHECKING_ID,
            name="Everyday Checking",
            account_type=AccountType.depository,
            current_balance=Decimal("1320.55"),
            available_balance=Decimal("1275.10"),
        ),
        Account(
            id=DEMO_CARD_ID,
            name="Rewards Visa",
            account_type=AccountType.credit,
            current_balance=Decimal("412.80"),
            available_balance=Decimal("150.00"),
        ),
    ])
    db.commit()

    count = _seed_transactions(db, today, random.Random(42))
    db.commit()
    logger.info(f"Seeded {count} demo transactions")

    found = detect_all_recurring(db)
    logger.info(f"Detected {sum(found.values())} recurring items")
    return True


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
