"""Unit tests for invoice status rules"""

import pytest
from decimal import Decimal
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_lifecycle import (
    can_transition,
    is_locked,
    status_after_receipt,
    status_after_reversal,
)


class TestLockedStatuses:
    @pytest.mark.parametrize("status", [InvoiceStatus.PAID, InvoiceStatus.VOID])
    def test_paid_and_void_are_locked(self, status):
        assert is_locked(status)

    @pytest.mark.parametrize("status", [InvoiceStatus.DRAFT, InvoiceStatus.SENT])
    def test_draft_and_sent_are_editable(self, status):
        assert not is_locked(status)

    def test_accepts_raw_values(self):
        assert is_locked("paid")
        assert not is_locked("draft")


class TestManualTransitions:
    @pytest.mark.parametrize(
        "current,requested",
        [
            (InvoiceStatus.DRAFT, InvoiceStatus.DRAFT),
            (InvoiceStatus.DRAFT, InvoiceStatus.SENT),
            (InvoiceStatus.DRAFT, InvoiceStatus.VOID),
            (InvoiceStatus.SENT, InvoiceStatus.SENT),
            (InvoiceStatus.SENT, InvoiceStatus.VOID),
        ],
    )
    def test_allowed(self, current, requested):
        assert can_transition(current, requested)

    @pytest.mark.parametrize(
        "current,requested",
        [
            (InvoiceStatus.DRAFT, InvoiceStatus.PAID),
            (InvoiceStatus.SENT, InvoiceStatus.PAID),
            (InvoiceStatus.SENT, InvoiceStatus.DRAFT),
            (InvoiceStatus.PAID, InvoiceStatus.SENT),
            (InvoiceStatus.VOID, InvoiceStatus.DRAFT),
        ],
    )
    def test_rejected(self, current, requested):
        assert not can_transition(current, requested)


class TestPaymentDrivenTransitions:
    def test_full_payment_marks_paid(self):
        assert status_after_receipt(
            InvoiceStatus.SENT, Decimal("45.00"), Decimal("45.00")
        ) == InvoiceStatus.PAID

    def test_overpayment_marks_paid(self):
        assert status_after_receipt(
            InvoiceStatus.SENT, Decimal("50.00"), Decimal("45.00")
        ) == InvoiceStatus.PAID

    def test_partial_payment_on_draft_marks_sent(self):
        assert status_after_receipt(
            InvoiceStatus.DRAFT, Decimal("10.00"), Decimal("45.00")
        ) == InvoiceStatus.SENT

    def test_receipt_never_changes_void(self):
        assert status_after_receipt(
            InvoiceStatus.VOID, Decimal("45.00"), Decimal("45.00")
        ) == InvoiceStatus.VOID

    def test_reversal_below_total_returns_paid_to_sent(self):
        assert status_after_reversal(
            InvoiceStatus.PAID, Decimal("20.00"), Decimal("45.00")
        ) == InvoiceStatus.SENT

    def test_reversal_still_covered_stays_paid(self):
        assert status_after_reversal(
            InvoiceStatus.PAID, Decimal("45.00"), Decimal("45.00")
        ) == InvoiceStatus.PAID

    @pytest.mark.parametrize("status", [InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.VOID])
    def test_reversal_keeps_other_statuses(self, status):
        assert status_after_reversal(status, Decimal("0.00"), Decimal("45.00")) == status
