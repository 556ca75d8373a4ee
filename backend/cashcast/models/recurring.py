"""
Recurring item database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Date, Numeric, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from cashcast.database import Base


class Frequency(str, enum.Enum):
    """Recurring frequency enumeration."""
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"
    annually = "annually"


# Nominal interval per cadence, shared by detection and projection
FREQUENCY_DAYS = {
    Frequency.weekly: 7,
    Frequency.biweekly: 14,
    Frequency.monthly: 30,
    Frequency.annually: 365,
}


class RecurringItem(Base):
    """An inferred recurring charge of one merchant on one account."""

    __tablename__ = "recurring_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    name = Column(String(255), nullable=False)
    merchant_name = Column(String(255), nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    frequency = Column(Enum(Frequency), nullable=False)
    last_date = Column(Date, nullable=True)
    next_projected_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_user_confirmed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="recurring_items")

    __table_args__ = (
        UniqueConstraint("account_id", "merchant_name", name="uq_recurring_account_merchant"),
    )
