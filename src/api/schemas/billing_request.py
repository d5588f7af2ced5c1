"""Request schemas for Billing API

Pydantic models for validating incoming HTTP requests.

Schemas check shape and types only. Business ranges (positive quantity,
ordered weight bounds, legal status, ...) are checked by the use cases so
that every rejection carries its billing error code.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_line import ItemType


class PriceRuleRequestSchema(BaseModel):
    """
    Request schema for creating or replacing a price rule

    Used for POST /billing/price-rules and PUT /billing/price-rules/{id}.
    """

    service_id: int = Field(
        ...,
        gt=0,
        description="Service this rule prices"
    )

    species_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Species scope (omit for all species)"
    )

    weight_min_kg: Optional[Decimal] = Field(
        default=None,
        description="Inclusive lower weight bound in kg"
    )

    weight_max_kg: Optional[Decimal] = Field(
        default=None,
        description="Inclusive upper weight bound in kg"
    )

    amount: Decimal = Field(
        ...,
        description="Price amount (must be >= 0)"
    )

    currency: Optional[str] = Field(
        default=None,
        description="ISO 4217 code (defaults to the clinic currency)"
    )

    is_active: bool = Field(
        default=True,
        description="Inactive rules are ignored by price resolution"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "service_id": 3,
                "species_id": 1,
                "weight_min_kg": "10.10",
                "weight_max_kg": "25.00",
                "amount": "240.00",
                "currency": "EUR",
                "is_active": True
            }
        }


class InvoiceLineRequestSchema(BaseModel):
    """One invoice line; omit id for a new line"""

    id: Optional[int] = Field(
        default=None,
        description="Existing line ID"
    )

    item_type: ItemType = Field(
        ...,
        description="service or product"
    )

    item_id: int = Field(
        ...,
        description="Service or product ID"
    )

    quantity: Decimal = Field(
        ...,
        description="Quantity billed (must be > 0)"
    )

    unit_price: Optional[Decimal] = Field(
        default=None,
        description="Unit price (required for services)"
    )


class InvoiceHeaderSchema(BaseModel):
    """Fields shared by invoice create and update requests"""

    client_id: int = Field(
        ...,
        gt=0,
        description="Client (contact) the invoice is addressed to"
    )

    consultation_id: Optional[int] = Field(
        default=None,
        description="Consultation that generated the invoice"
    )

    issue_date: date = Field(
        ...,
        description="Issue date"
    )

    due_date: date = Field(
        ...,
        description="Payment due date"
    )

    lines: List[InvoiceLineRequestSchema] = Field(
        default_factory=list,
        description="Invoice lines (at least one)"
    )


class InvoiceRequestSchema(InvoiceHeaderSchema):
    """
    Request schema for creating an invoice

    Used for POST /billing/invoices endpoint.
    """

    invoice_number: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Unique invoice number (generated when omitted)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Initial status (draft or sent)"
    )

    @field_validator('invoice_number')
    @classmethod
    def strip_invoice_number(cls, v):
        """Blank numbers are treated as omitted"""
        if v is None:
            return v
        return v.strip() or None

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 42,
                "consultation_id": 7,
                "issue_date": "2025-03-01",
                "due_date": "2025-03-31",
                "status": "draft",
                "lines": [
                    {"item_type": "service", "item_id": 3, "quantity": "2", "unit_price": "10.00"},
                    {"item_type": "product", "item_id": 9, "quantity": "1"}
                ]
            }
        }


class InvoiceUpdateRequestSchema(InvoiceHeaderSchema):
    """
    Request schema for replacing an invoice header and line set

    Used for PUT /billing/invoices/{id} endpoint.
    """

    invoice_number: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Unique invoice number"
    )

    status: InvoiceStatus = Field(
        ...,
        description="Requested status"
    )

    version: Optional[int] = Field(
        default=None,
        description="Version read by the client; stale writes are rejected"
    )


class PaymentRequestSchema(BaseModel):
    """
    Request schema for recording a payment

    Used for POST /billing/invoices/{id}/payments endpoint.
    """

    amount: Decimal = Field(
        ...,
        description="Amount received (must be > 0)"
    )

    payment_date: Optional[datetime] = Field(
        default=None,
        description="When the payment was received (defaults to now)"
    )

    method: str = Field(
        ...,
        max_length=50,
        description="Payment method (e.g., 'card', 'cash', 'transfer')"
    )

    transaction_id: Optional[str] = Field(
        default=None,
        max_length=255,
        description="External transaction reference"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "45.00",
                "method": "card",
                "transaction_id": "txn_8f2a91"
            }
        }
