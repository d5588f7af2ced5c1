"""Invoice lifecycle rules

Status machine: draft -> sent -> paid, with void reachable from draft and
sent by explicit cancellation. paid is reached through payments only.
"""

from decimal import Decimal
from src.domain.invoice import InvoiceStatus

LOCKED_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.VOID})

CREATABLE_STATUSES = frozenset({InvoiceStatus.DRAFT, InvoiceStatus.SENT})

# Transitions a caller may request through a header update
MANUAL_TRANSITIONS = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.VOID}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.VOID}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.VOID: frozenset(),
}


def is_locked(status: InvoiceStatus) -> bool:
    """paid and void invoices reject header and line edits"""
    return InvoiceStatus(status) in LOCKED_STATUSES


def can_transition(current: InvoiceStatus, requested: InvoiceStatus) -> bool:
    current = InvoiceStatus(current)
    requested = InvoiceStatus(requested)
    if current == requested:
        return True
    return requested in MANUAL_TRANSITIONS[current]


def status_after_receipt(
    current: InvoiceStatus, amount_paid: Decimal, total_amount: Decimal
) -> InvoiceStatus:
    """
    Status once a payment has been added

    Settled invoices become paid (overpayment included). Anything short of
    the total leaves the invoice sent; there is no partially-paid state.
    """
    current = InvoiceStatus(current)
    if current == InvoiceStatus.VOID:
        return current
    if amount_paid >= total_amount:
        return InvoiceStatus.PAID
    return InvoiceStatus.SENT


def status_after_reversal(
    current: InvoiceStatus, amount_paid: Decimal, total_amount: Decimal
) -> InvoiceStatus:
    """A paid invoice that is no longer settled falls back to sent"""
    current = InvoiceStatus(current)
    if current == InvoiceStatus.PAID and amount_paid < total_amount:
        return InvoiceStatus.SENT
    return current
