"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.

Commands carry raw business values; range checks (positive quantity,
non-negative price, weight bounds, ...) are made by the use cases so that
they surface as ValidationFailure results rather than pydantic errors.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_line import ItemType


class CallerContext(BaseModel):
    """
    Identity of the caller, supplied by the identity service

    Passed explicitly into every operation. The billing engine only records
    it in logs; authorization has already happened upstream.
    """

    caller_id: str = Field(
        ...,
        description="Authenticated user identifier"
    )

    roles: List[str] = Field(
        default_factory=list,
        description="Roles granted to the caller (e.g., 'admin', 'doctor', 'client')"
    )

    contact_id: Optional[int] = Field(
        default=None,
        description="Client (contact) record owned by the caller, if any"
    )

    @classmethod
    def system(cls) -> "CallerContext":
        return cls(caller_id="system", roles=["system"])

    def has_any_role(self, *roles: str) -> bool:
        wanted = {role.lower() for role in roles}
        return any(role.lower() in wanted for role in self.roles)


# ---------------------------------------------------------------------------
# Price rules
# ---------------------------------------------------------------------------


class ResolvePriceQueryDTO(BaseModel):
    """
    Query DTO for price resolution

    Used as input to ResolvePrice use case.
    """

    service_id: int = Field(
        ...,
        description="Service to price"
    )

    species_id: Optional[int] = Field(
        default=None,
        description="Patient species, if known"
    )

    weight_kg: Optional[Decimal] = Field(
        default=None,
        description="Patient weight in kg, if known"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "service_id": 3,
                "species_id": 1,
                "weight_kg": "15.00"
            }
        }


class PriceQuoteDTO(BaseModel):
    """
    Response DTO for price resolution

    Returned by ResolvePrice use case.
    """

    service_id: int = Field(
        ...,
        description="Priced service"
    )

    price_rule_id: int = Field(
        ...,
        description="Rule that produced the price"
    )

    amount: Decimal = Field(
        ...,
        description="Resolved amount"
    )

    currency: str = Field(
        ...,
        description="Currency code (ISO 4217)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "service_id": 3,
                "price_rule_id": 12,
                "amount": "240.00",
                "currency": "EUR"
            }
        }


class PriceRuleCommandDTO(BaseModel):
    """
    Command DTO for creating or replacing a price rule

    Used as input to CreatePriceRule and UpdatePriceRule use cases.
    """

    service_id: int = Field(
        ...,
        description="Service this rule prices"
    )

    species_id: Optional[int] = Field(
        default=None,
        description="Species scope (None = all species)"
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
        description="ISO 4217 code; defaults to the configured currency"
    )

    is_active: bool = Field(
        default=True,
        description="Inactive rules are ignored by price resolution"
    )


class PriceRuleResponseDTO(BaseModel):
    """
    Response DTO for price rule operations
    """

    price_rule_id: int
    service_id: int
    species_id: Optional[int] = None
    weight_min_kg: Optional[Decimal] = None
    weight_max_kg: Optional[Decimal] = None
    amount: Decimal
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ListPriceRulesResponseDTO(BaseModel):
    price_rules: List[PriceRuleResponseDTO]
    limit: int
    offset: int


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


class InvoiceLineSpecDTO(BaseModel):
    """
    One submitted invoice line

    Lines with an id update the existing line of the same id; lines without
    an id are inserted.
    """

    id: Optional[int] = Field(
        default=None,
        description="Existing line ID (omit for new lines)"
    )

    item_type: ItemType = Field(
        ...,
        description="Kind of item billed (service or product)"
    )

    item_id: int = Field(
        ...,
        description="Service or product ID, depending on item_type"
    )

    quantity: Decimal = Field(
        ...,
        description="Quantity billed (must be > 0)"
    )

    unit_price: Optional[Decimal] = Field(
        default=None,
        description="Unit price (must be >= 0); products default to the catalog price"
    )


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice with its lines

    Used as input to CreateInvoice use case.
    """

    client_id: int = Field(
        ...,
        description="Client (contact) the invoice is addressed to"
    )

    consultation_id: Optional[int] = Field(
        default=None,
        description="Consultation that generated the invoice"
    )

    invoice_number: Optional[str] = Field(
        default=None,
        description="Unique invoice number; generated when omitted"
    )

    issue_date: date = Field(
        ...,
        description="Issue date"
    )

    due_date: date = Field(
        ...,
        description="Payment due date (>= issue_date)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Initial status (draft or sent)"
    )

    lines: List[InvoiceLineSpecDTO] = Field(
        default_factory=list,
        description="Invoice lines (at least one)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 42,
                "consultation_id": 7,
                "invoice_number": "INV-2025-000001",
                "issue_date": "2025-03-01",
                "due_date": "2025-03-31",
                "status": "draft",
                "lines": [
                    {"item_type": "service", "item_id": 3, "quantity": "2", "unit_price": "10.00"},
                    {"item_type": "product", "item_id": 9, "quantity": "1", "unit_price": "25.00"}
                ]
            }
        }


class UpdateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for replacing an invoice header and its full line set

    Used as input to UpdateInvoice use case.
    """

    invoice_id: int = Field(
        ...,
        description="Invoice to update"
    )

    client_id: int = Field(
        ...,
        description="Client (contact) the invoice is addressed to"
    )

    consultation_id: Optional[int] = Field(
        default=None,
        description="Consultation that generated the invoice"
    )

    invoice_number: str = Field(
        ...,
        description="Unique invoice number"
    )

    issue_date: date = Field(
        ...,
        description="Issue date"
    )

    due_date: date = Field(
        ...,
        description="Payment due date (>= issue_date)"
    )

    status: InvoiceStatus = Field(
        ...,
        description="Requested status"
    )

    lines: List[InvoiceLineSpecDTO] = Field(
        default_factory=list,
        description="Complete replacement line set (at least one)"
    )

    version: Optional[int] = Field(
        default=None,
        description="Version the caller read; rejected if the invoice changed since"
    )


class InvoiceLineResponseDTO(BaseModel):
    line_id: int
    item_type: str
    item_id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for a complete invoice

    Returned by CreateInvoice, UpdateInvoice and GetInvoice use cases.
    """

    invoice_id: int = Field(
        ...,
        description="Invoice ID"
    )

    client_id: int = Field(
        ...,
        description="Client (contact) ID"
    )

    consultation_id: Optional[int] = Field(
        default=None,
        description="Consultation ID"
    )

    invoice_number: str = Field(
        ...,
        description="Unique invoice number"
    )

    issue_date: date = Field(
        ...,
        description="Issue date"
    )

    due_date: date = Field(
        ...,
        description="Payment due date"
    )

    status: str = Field(
        ...,
        description="Invoice status (draft, sent, paid, void)"
    )

    total_amount: Decimal = Field(
        ...,
        description="Sum of line totals"
    )

    amount_paid: Decimal = Field(
        ...,
        description="Sum of recorded payments"
    )

    version: int = Field(
        ...,
        description="Row version to send back on update"
    )

    lines: List[InvoiceLineResponseDTO] = Field(
        default_factory=list,
        description="Invoice lines"
    )

    created_at: datetime = Field(
        ...,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        ...,
        description="Last update timestamp"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": 1,
                "client_id": 42,
                "consultation_id": 7,
                "invoice_number": "INV-2025-000001",
                "issue_date": "2025-03-01",
                "due_date": "2025-03-31",
                "status": "draft",
                "total_amount": "45.00",
                "amount_paid": "0.00",
                "version": 1,
                "lines": [
                    {
                        "line_id": 1,
                        "item_type": "service",
                        "item_id": 3,
                        "description": "Consultation",
                        "quantity": "2.00",
                        "unit_price": "10.00",
                        "line_total": "20.00"
                    }
                ],
                "created_at": "2025-03-01T09:00:00Z",
                "updated_at": "2025-03-01T09:00:00Z"
            }
        }


class InvoiceSummaryDTO(BaseModel):
    """Invoice header without lines, used in listings"""

    invoice_id: int
    client_id: int
    consultation_id: Optional[int] = None
    invoice_number: str
    issue_date: date
    due_date: date
    status: str
    total_amount: Decimal
    amount_paid: Decimal


class ListInvoicesResponseDTO(BaseModel):
    invoices: List[InvoiceSummaryDTO]
    limit: int
    offset: int


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class RecordPaymentCommandDTO(BaseModel):
    """
    Command DTO for recording a payment

    Used as input to RecordPayment use case.
    """

    invoice_id: int = Field(
        ...,
        description="Invoice being paid"
    )

    amount: Decimal = Field(
        ...,
        description="Amount received (must be > 0)"
    )

    payment_date: Optional[datetime] = Field(
        default=None,
        description="When the payment was received (defaults to now, UTC)"
    )

    method: str = Field(
        ...,
        description="Payment method (e.g., 'card', 'cash', 'transfer')"
    )

    transaction_id: Optional[str] = Field(
        default=None,
        description="External transaction reference"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": 1,
                "amount": "45.00",
                "payment_date": "2025-03-05T14:12:00Z",
                "method": "card",
                "transaction_id": "txn_8f2a91"
            }
        }


class PaymentResponseDTO(BaseModel):
    payment_id: int
    invoice_id: int
    payment_date: datetime
    amount: Decimal
    method: str
    transaction_id: Optional[str] = None
    created_at: datetime


class PaymentLedgerResponseDTO(BaseModel):
    """
    Response DTO for ledger operations

    Returned by RecordPayment (the new payment) and ReversePayment (the
    removed payment), together with the invoice state after the operation.
    """

    payment: PaymentResponseDTO = Field(
        ...,
        description="Payment recorded or reversed"
    )

    invoice_status: str = Field(
        ...,
        description="Invoice status after the operation"
    )

    amount_paid: Decimal = Field(
        ...,
        description="Invoice amount paid after the operation"
    )

    total_amount: Decimal = Field(
        ...,
        description="Invoice total"
    )


class ListPaymentsResponseDTO(BaseModel):
    invoice_id: int
    payments: List[PaymentResponseDTO]
    amount_paid: Decimal
