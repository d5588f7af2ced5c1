"""Invoice Domain Entity

Tracks client invoices and their payment status.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, String, Date
from src.domain.base import BaseModel, ID_TYPE


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    VOID = "void"


class Invoice(BaseModel, table=True):
    """
    Invoice - Bill addressed to a clinic client

    Domain Rules:
    - invoice_number must be unique
    - total_amount is the sum of all invoice_lines.line_total, never edited directly
    - due_date >= issue_date
    - paid and void invoices reject structural edits
    - version is bumped on every write (optimistic concurrency)
    """

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint('due_date >= issue_date', name='invoice_due_after_issue'),
        Index('ix_invoices_client_id', 'client_id'),
        Index('ix_invoices_status', 'status'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    client_id: int = Field(
        description="Client (contact) the invoice is addressed to"
    )

    consultation_id: Optional[int] = Field(
        default=None,
        description="Consultation that generated the invoice, if any"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., INV-2025-000001)"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Issue date"
    )

    due_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Payment due date"
    )

    total_amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Sum of line totals (precision: 12,2)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Invoice status (draft, sent, paid, void)"
    )

    version: int = Field(
        default=1,
        description="Row version, incremented on every update"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "client_id": 42,
                "consultation_id": 7,
                "invoice_number": "INV-2025-000001",
                "issue_date": "2025-03-01",
                "due_date": "2025-03-31",
                "total_amount": "45.00",
                "status": "sent",
                "version": 3,
                "created_at": "2025-03-01T09:00:00Z",
                "updated_at": "2025-03-02T10:30:00Z"
            }
        }
