"""ReversePayment Use Case

Removes a payment and lets the invoice fall back from paid when it is no
longer settled.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return
from src.app.errors import ConcurrencyConflictError, Conflict, NotFound, StorageFailure
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_lifecycle import status_after_reversal
from .dtos import CallerContext, PaymentLedgerResponseDTO
from .mappers import to_payment_dto

logger = logging.getLogger(__name__)


class ReversePayment:
    """
    Use Case: Reverse (delete) a payment

    Business Rules:
    1. The payment row is removed; amount paid is recomputed from the rest
    2. paid falls back to sent when the remaining payments no longer cover
       the total; other statuses are kept (never draft, never void)
    3. Deletion and status change are committed together
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
        self, payment_id: int, caller: Optional[CallerContext] = None
    ) -> Result[PaymentLedgerResponseDTO]:
        """
        Execute payment reversal

        Args:
            payment_id: Payment to reverse
            caller: Identity of the requesting user

        Returns:
            Result[PaymentLedgerResponseDTO]: Removed payment and invoice state, or error
        """
        caller = caller or CallerContext.system()
        try:
            payment = await self.payment_repo.get_by_id(payment_id)
            if not payment:
                return Return.err(
                    NotFound(
                        code="PAYMENT_NOT_FOUND",
                        message=f"Payment {payment_id} not found",
                    )
                )

            invoice = await self.invoice_repo.get_by_id(payment.invoice_id, for_update=True)
            if not invoice:
                return Return.err(
                    NotFound(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {payment.invoice_id} not found",
                    )
                )

            reversed_payment = to_payment_dto(payment)
            await self.payment_repo.delete(payment)

            amount_paid = await self.payment_repo.get_total_paid(invoice.id)
            total_amount = Decimal(invoice.total_amount)
            previous_status = InvoiceStatus(invoice.status)
            new_status = status_after_reversal(previous_status, amount_paid, total_amount)

            invoice.status = new_status
            await self.invoice_repo.update(invoice)
            await self.uow.commit()

            logger.info(
                f"Payment {payment_id} of {reversed_payment.amount} reversed on invoice "
                f"{invoice.invoice_number} by {caller.caller_id}: "
                f"{previous_status.value} -> {new_status.value}"
            )

            return Return.ok(
                PaymentLedgerResponseDTO(
                    payment=reversed_payment,
                    invoice_status=new_status.value,
                    amount_paid=amount_paid,
                    total_amount=total_amount,
                )
            )

        except ConcurrencyConflictError as e:
            await self.uow.rollback()
            logger.warning(f"Payment reversal lost a race: {e}")
            return Return.err(
                Conflict(
                    code="INVOICE_MODIFIED_CONCURRENTLY",
                    message=f"Invoice of payment {payment_id} was modified concurrently, retry",
                    reason=str(e),
                )
            )
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Payment reversal failed: {e}")
            return Return.err(
                StorageFailure(
                    code="REVERSE_PAYMENT_FAILED",
                    message="Failed to reverse payment",
                    reason=str(e),
                )
            )
