"""Shared test fixtures."""

import os

# Keep the app's own engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import date
from decimal import Decimal
import uuid

from cashcast.database import Base
from cashcast.dependencies import get_db
from cashcast.main import app
from cashcast.models.account import Account, AccountType
from cashcast.models.transaction import Transaction
from cashcast.models.recurring import RecurringItem, Frequency


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_account(db_session):
    """Create a sample checking account."""
    account = Account(
        id=str(uuid.uuid4()),
        name="Test Checking",
        account_type=AccountType.depository,
        current_balance=Decimal("120.00"),
        available_balance=Decimal("100.00"),
        is_active=True,
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def sample_transaction(db_session, sample_account):
    """Create a sample transaction."""
    txn = Transaction(
        id=str(uuid.uuid4()),
        account_id=sample_account.id,
        amount=Decimal("50.00"),
        date=date(2024, 1, 15),
        name="WHOLE FOODS #1234",
        merchant_name="Whole Foods",
        pending=False,
    )
    db_session.add(txn)
    db_session.commit()
    db_session.refresh(txn)
    return txn


@pytest.fixture
def sample_recurring_item(db_session, sample_account):
    """Create a sample recurring item."""
    item = RecurringItem(
        id=str(uuid.uuid4()),
        account_id=sample_account.id,
        name="Netflix",
        merchant_name="Netflix",
        amount=Decimal("15.99"),
        frequency=Frequency.monthly,
        last_date=date(2024, 1, 1),
        next_projected_date=date(2024, 1, 31),
        is_active=True,
        is_user_confirmed=False,
    )
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item


@pytest.fixture
def add_transactions(db_session):
    """Factory adding one transaction per date for a merchant."""
    def _add(account_id, name, amounts, dates, merchant_name=None, pending=False):
        if not isinstance(amounts, (list, tuple)):
            amounts = [amounts] * len(dates)
        for amount, txn_date in zip(amounts, dates):
            db_session.add(Transaction(
                id=str(uuid.uuid4()),
                account_id=account_id,
                amount=Decimal(str(amount)),
                date=txn_date,
                name=name,
                merchant_name=merchant_name,
                pending=pending,
            ))
        db_session.commit()
    return _add


@pytest.fixture
def add_recurring_item(db_session):
    """Factory adding a recurring item directly."""
    def _add(account_id, name, amount, frequency, next_projected_date=None,
             last_date=None, is_active=True):
        item = RecurringItem(
            id=str(uuid.uuid4()),
            account_id=account_id,
            name=name,
            merchant_name=name,
            amount=Decimal(str(amount)),
            frequency=frequency,
            last_date=last_date,
            next_projected_date=next_projected_date,
            is_active=is_active,
        )
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item
    return _add
