"""RecordPayment Use Case

Appends a receipt to an invoice and advances the invoice status.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional
from libs.result import Result, Return
from src.app.errors import (
    ConcurrencyConflictError,
    Conflict,
    NotFound,
    StorageFailure,
    ValidationFailure,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_lifecycle import status_after_receipt
from src.domain.money import has_at_most_two_places
from src.domain.payment import Payment
from .dtos import CallerContext, PaymentLedgerResponseDTO, RecordPaymentCommandDTO
from .mappers import to_payment_dto

logger = logging.getLogger(__name__)


def to_naive_utc(moment: datetime) -> datetime:
    """Payment dates are stored as naive UTC; aware values are converted first"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class RecordPayment:
    """
    Use Case: Record a payment against an invoice

    Business Rules:
    1. amount > 0 with at most two decimals; method is required
    2. Void invoices accept no payments
    3. Partial payments are accepted; the invoice is (or stays) sent
    4. Payments reaching the total mark the invoice paid
    5. Overpayments are accepted and logged; no credit is created
    6. Payment and status change are committed together
    7. payment_date is stored as UTC (aware values are converted)

    Flow:
    1. Validate command
    2. Get invoice with lock (SELECT FOR UPDATE)
    3. Create payment
    4. Recompute amount paid and status
    5. Update invoice (version-guarded)
    6. Commit transaction
    7. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(
        self, command: RecordPaymentCommandDTO, caller: Optional[CallerContext] = None
    ) -> Result[PaymentLedgerResponseDTO]:
        """
        Execute payment recording

        Args:
            command: RecordPaymentCommandDTO with invoice_id, amount, method
            caller: Identity of the requesting user

        Returns:
            Result[PaymentLedgerResponseDTO]: New payment and invoice state, or error
        """
        caller = caller or CallerContext.system()

        # Step 1: Validate command
        try:
            valid_amount = Decimal(command.amount) > 0 and has_at_most_two_places(command.amount)
        except (InvalidOperation, TypeError, ValueError):
            valid_amount = False
        if not valid_amount:
            return Return.err(
                ValidationFailure(
                    code="INVALID_PAYMENT_AMOUNT",
                    message=f"Payment amount must be positive with at most two decimals, got {command.amount}",
                )
            )

        method = (command.method or "").strip()
        if not method:
            return Return.err(
                ValidationFailure(
                    code="INVALID_PAYMENT_METHOD",
                    message="Payment method is required",
                )
            )

        try:
            # Step 2: Get invoice with lock
            invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
            if not invoice:
                return Return.err(
                    NotFound(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {command.invoice_id} not found",
                    )
                )

            if InvoiceStatus(invoice.status) == InvoiceStatus.VOID:
                error = Conflict(
                    code="INVOICE_VOID",
                    message=f"Invoice {invoice.invoice_number} is void and accepts no payments",
                )
                await self.uow.rollback()
                return Return.err(error)

            # Step 3: Create payment
            payment = Payment(
                invoice_id=invoice.id,
                payment_date=to_naive_utc(command.payment_date or datetime.utcnow()),
                amount=Decimal(command.amount),
                method=method,
                transaction_id=command.transaction_id,
            )
            created_payment = await self.payment_repo.create(payment)

            # Step 4: Recompute amount paid and status
            amount_paid = await self.payment_repo.get_total_paid(invoice.id)
            total_amount = Decimal(invoice.total_amount)
            previous_status = InvoiceStatus(invoice.status)
            new_status = status_after_receipt(previous_status, amount_paid, total_amount)

            # Step 5: Update invoice; bumps the version even without a status change
            invoice.status = new_status
            updated_invoice = await self.invoice_repo.update(invoice)

            # Step 6: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Payment {created_payment.id} of {created_payment.amount} ({method}) recorded on "
                f"invoice {invoice.invoice_number} by {caller.caller_id}: "
                f"{previous_status.value} -> {new_status.value}"
            )
            if amount_paid > total_amount:
                logger.warning(
                    f"Invoice {invoice.invoice_number} overpaid: "
                    f"paid {amount_paid}, total {total_amount}"
                )

            # Step 7: Build response
            return Return.ok(
                PaymentLedgerResponseDTO(
                    payment=to_payment_dto(created_payment),
                    invoice_status=new_status.value,
                    amount_paid=amount_paid,
                    total_amount=updated_invoice.total_amount,
                )
            )

        except ConcurrencyConflictError as e:
            await self.uow.rollback()
            logger.warning(f"Payment recording lost a race: {e}")
            return Return.err(
                Conflict(
                    code="INVOICE_MODIFIED_CONCURRENTLY",
                    message=f"Invoice {command.invoice_id} was modified concurrently, retry",
                    reason=str(e),
                )
            )
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Payment recording failed: {e}")
            return Return.err(
                StorageFailure(
                    code="RECORD_PAYMENT_FAILED",
                    message="Failed to record payment",
                    reason=str(e),
                )
            )
