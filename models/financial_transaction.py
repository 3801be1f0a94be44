"""
Financial transaction model for client quotes, payments and adjustments.
"""

import enum

from sqlalchemy import Column, Date, Enum, ForeignKey, Numeric, String, Text

from .base import UUID, BaseModel


class TransactionType(str, enum.Enum):
    """Kind of entry on a client's account."""

    QUOTE = "quote"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"


class FinancialTransaction(BaseModel):
    """
    One entry on a client's account.

    Quotes raise the amount owed; payments and adjustments reduce it.
    """

    __tablename__ = "financials"

    client_id = Column(UUID(), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_type = Column(
        Enum(TransactionType, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    case_number = Column(String(100), nullable=True)
    service_description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    transaction_date = Column(Date, nullable=False)
