"""
Transaction database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Date, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship
from cashcast.database import Base


class Transaction(Base):
    """Transaction model, as written by the bank sync."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)  # Positive = outflow, negative = inflow
    date = Column(Date, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    merchant_name = Column(String(255), nullable=True)
    pending = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")

    # Indexes for common queries
    __table_args__ = (
        Index("idx_transaction_account_id", "account_id"),
        Index("idx_transaction_pending", "pending"),
    )
