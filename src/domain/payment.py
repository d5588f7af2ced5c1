"""Payment Domain Entity

Cash receipt recorded against an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, ID_TYPE


class Payment(BaseModel, table=True):
    """
    Payment - Receipt against one invoice

    Domain Rules:
    - amount is strictly positive
    - Payments are inserted or deleted (reversal), never updated
    - The sum of an invoice's payments drives its status
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint('amount > 0', name='payment_amount_positive'),
        Index('ix_payments_invoice_id', 'invoice_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique payment identifier (auto-increment)"
    )

    invoice_id: int = Field(
        sa_column=Column(ID_TYPE, ForeignKey("invoices.id"), nullable=False),
        description="Foreign key to Invoice"
    )

    payment_date: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the payment was received (UTC)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount received (precision: 12,2)"
    )

    method: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Payment method (e.g., 'card', 'cash', 'transfer')"
    )

    transaction_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="External transaction reference for card/transfer payments"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Record creation timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_id": 1,
                "payment_date": "2025-03-05T14:12:00Z",
                "amount": "45.00",
                "method": "card",
                "transaction_id": "txn_8f2a91",
                "created_at": "2025-03-05T14:12:03Z"
            }
        }
