"""
Account database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Enum
from sqlalchemy.orm import relationship
import enum
from cashcast.database import Base


class AccountType(str, enum.Enum):
    """Account type enumeration."""
    depository = "depository"
    credit = "credit"
    investment = "investment"
    loan = "loan"
    other = "other"


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    account_type = Column(Enum(AccountType), nullable=False, default=AccountType.depository)
    current_balance = Column(Numeric(14, 2), nullable=True)
    available_balance = Column(Numeric(14, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")
    recurring_items = relationship("RecurringItem", back_populates="account")
