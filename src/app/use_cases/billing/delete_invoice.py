"""DeleteInvoice Use Case

Removes an invoice and its lines when no money has been received on it.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.errors import Conflict, NotFound, StorageFailure
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import InvoiceStatus
from .dtos import CallerContext

logger = logging.getLogger(__name__)


class DeleteInvoice:
    """
    Use Case: Delete an invoice

    Business Rules:
    1. Paid invoices cannot be deleted
    2. Invoices with recorded payments cannot be deleted
    3. Lines are deleted together with the invoice
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        payment_repo: PaymentRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.payment_repo = payment_repo

    async def execute(
        self, invoice_id: int, caller: Optional[CallerContext] = None
    ) -> Result[int]:
        caller = caller or CallerContext.system()
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                return Return.err(
                    NotFound(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_id} not found",
                    )
                )

            # Errors are built before rollback, which expires the loaded invoice
            if InvoiceStatus(invoice.status) == InvoiceStatus.PAID:
                error = Conflict(
                    code="INVOICE_PAID",
                    message=f"Invoice {invoice.invoice_number} is paid and cannot be deleted",
                )
                await self.uow.rollback()
                return Return.err(error)

            payment_count = await self.payment_repo.count_for_invoice(invoice.id)
            if payment_count > 0:
                error = Conflict(
                    code="INVOICE_HAS_PAYMENTS",
                    message=f"Invoice {invoice.invoice_number} has {payment_count} payment(s) "
                            f"and cannot be deleted",
                    reason="Reverse the payments first",
                )
                await self.uow.rollback()
                return Return.err(error)

            invoice_number = invoice.invoice_number
            for line in await self.invoice_line_repo.get_by_invoice_id(invoice.id):
                await self.invoice_line_repo.delete(line)
            await self.invoice_repo.delete(invoice)
            await self.uow.commit()

            logger.info(f"Invoice {invoice_number} deleted by {caller.caller_id}")
            return Return.ok(invoice_id)

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Invoice deletion failed: {e}")
            return Return.err(
                StorageFailure(
                    code="DELETE_INVOICE_FAILED",
                    message="Failed to delete invoice",
                    reason=str(e),
                )
            )
