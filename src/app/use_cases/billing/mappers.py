"""Entity to DTO mapping for billing use cases"""

from decimal import Decimal
from typing import Sequence
from src.domain.invoice import Invoice
from src.domain.invoice_line import InvoiceLine
from src.domain.payment import Payment
from src.domain.price_rule import PriceRule
from .dtos import (
    InvoiceLineResponseDTO,
    InvoiceResponseDTO,
    InvoiceSummaryDTO,
    PaymentResponseDTO,
    PriceRuleResponseDTO,
)


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def to_price_rule_dto(rule: PriceRule) -> PriceRuleResponseDTO:
    return PriceRuleResponseDTO(
        price_rule_id=rule.id,
        service_id=rule.service_id,
        species_id=rule.species_id,
        weight_min_kg=rule.weight_min_kg,
        weight_max_kg=rule.weight_max_kg,
        amount=rule.amount,
        currency=rule.currency,
        is_active=rule.is_active,
        created_at=rule.created_at,
        updated_at=rule.updated_at,
    )


def to_invoice_line_dto(line: InvoiceLine) -> InvoiceLineResponseDTO:
    item = line.item_ref
    return InvoiceLineResponseDTO(
        line_id=line.id,
        item_type=item.item_type.value,
        item_id=item.item_id,
        description=line.description,
        quantity=line.quantity,
        unit_price=line.unit_price,
        line_total=line.line_total,
    )


def to_invoice_dto(
    invoice: Invoice, lines: Sequence[InvoiceLine], amount_paid: Decimal
) -> InvoiceResponseDTO:
    return InvoiceResponseDTO(
        invoice_id=invoice.id,
        client_id=invoice.client_id,
        consultation_id=invoice.consultation_id,
        invoice_number=invoice.invoice_number,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        status=_status_value(invoice.status),
        total_amount=invoice.total_amount,
        amount_paid=amount_paid,
        version=invoice.version,
        lines=[to_invoice_line_dto(line) for line in lines],
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


def to_invoice_summary_dto(invoice: Invoice, amount_paid: Decimal) -> InvoiceSummaryDTO:
    return InvoiceSummaryDTO(
        invoice_id=invoice.id,
        client_id=invoice.client_id,
        consultation_id=invoice.consultation_id,
        invoice_number=invoice.invoice_number,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        status=_status_value(invoice.status),
        total_amount=invoice.total_amount,
        amount_paid=amount_paid,
    )


def to_payment_dto(payment: Payment) -> PaymentResponseDTO:
    return PaymentResponseDTO(
        payment_id=payment.id,
        invoice_id=payment.invoice_id,
        payment_date=payment.payment_date,
        amount=payment.amount,
        method=payment.method,
        transaction_id=payment.transaction_id,
        created_at=payment.created_at,
    )
