"""CreateInvoice Use Case

Creates a client invoice together with its initial line set.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.errors import (
    Conflict,
    DuplicateInvoiceNumberError,
    StorageFailure,
    ValidationFailure,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_lifecycle import CREATABLE_STATUSES
from src.domain.money import ZERO
from .dtos import CallerContext, CreateInvoiceCommandDTO, InvoiceResponseDTO
from .line_synchronizer import InvoiceLineSynchronizer
from .mappers import to_invoice_dto

logger = logging.getLogger(__name__)


class CreateInvoice:
    """
    Use Case: Create an invoice with its lines

    Business Rules:
    1. due_date >= issue_date
    2. Invoices start as draft or sent
    3. Invoice number is unique; auto-generated (INV-YYYY-NNNNNN) when omitted
    4. At least one line; every line resolves against the catalog
    5. total_amount = sum of line totals

    Flow:
    1. Validate header
    2. Reserve the invoice number
    3. Resolve lines through the synchronizer (no existing lines)
    4. Create invoice, then its lines
    5. Commit transaction
    6. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        line_synchronizer: InvoiceLineSynchronizer,
        invoice_number_prefix: str = "INV",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.line_synchronizer = line_synchronizer
        self.invoice_number_prefix = invoice_number_prefix

    async def execute(
        self, command: CreateInvoiceCommandDTO, caller: Optional[CallerContext] = None
    ) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice creation

        Args:
            command: CreateInvoiceCommandDTO with header and lines
            caller: Identity of the requesting user

        Returns:
            Result[InvoiceResponseDTO]: Success with invoice details or error
        """
        caller = caller or CallerContext.system()

        # Step 1: Validate header
        if command.due_date < command.issue_date:
            return Return.err(
                ValidationFailure(
                    code="INVALID_DUE_DATE",
                    message="Due date cannot be before issue date",
                    reason=f"issue_date={command.issue_date}, due_date={command.due_date}",
                )
            )

        if InvoiceStatus(command.status) not in CREATABLE_STATUSES:
            return Return.err(
                ValidationFailure(
                    code="INVALID_STATUS_TRANSITION",
                    message=f"Invoices cannot be created as {InvoiceStatus(command.status).value}",
                )
            )

        try:
            # Step 2: Reserve the invoice number
            invoice_number = command.invoice_number
            if invoice_number:
                if await self.invoice_repo.invoice_number_exists(invoice_number):
                    return Return.err(
                        Conflict(
                            code="DUPLICATE_INVOICE_NUMBER",
                            message=f"Invoice number {invoice_number} is already in use",
                        )
                    )
            else:
                invoice_number = await self.invoice_repo.generate_invoice_number(
                    self.invoice_number_prefix
                )

            # Step 3: Resolve lines
            plan_result = await self.line_synchronizer.synchronize(None, [], command.lines)
            if plan_result.is_err():
                await self.uow.rollback()
                return Return.err(plan_result.error)
            plan = plan_result.value

            # Step 4: Create invoice, then its lines
            invoice = Invoice(
                client_id=command.client_id,
                consultation_id=command.consultation_id,
                invoice_number=invoice_number,
                issue_date=command.issue_date,
                due_date=command.due_date,
                status=InvoiceStatus(command.status),
                total_amount=plan.new_total,
            )
            created_invoice = await self.invoice_repo.create(invoice)

            lines = []
            for line in plan.to_insert:
                line.invoice_id = created_invoice.id
                lines.append(await self.invoice_line_repo.create(line))

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Invoice {created_invoice.invoice_number} created for client "
                f"{created_invoice.client_id} by {caller.caller_id} "
                f"({len(lines)} lines, total {created_invoice.total_amount})"
            )

            # Step 6: Build response
            return Return.ok(to_invoice_dto(created_invoice, lines, ZERO))

        except DuplicateInvoiceNumberError as e:
            await self.uow.rollback()
            return Return.err(
                Conflict(
                    code="DUPLICATE_INVOICE_NUMBER",
                    message=f"Invoice number {e.invoice_number} is already in use",
                    reason=str(e),
                )
            )
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Invoice creation failed: {e}")
            return Return.err(
                StorageFailure(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
