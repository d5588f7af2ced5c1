"""UpdateInvoice Use Case

Replaces an invoice header and its complete line set in one unit of work.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.errors import (
    ConcurrencyConflictError,
    Conflict,
    DuplicateInvoiceNumberError,
    NotFound,
    StorageFailure,
    ValidationFailure,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_lifecycle import can_transition, is_locked
from .dtos import CallerContext, InvoiceResponseDTO, UpdateInvoiceCommandDTO
from .line_synchronizer import InvoiceLineSynchronizer
from .mappers import to_invoice_dto

logger = logging.getLogger(__name__)


class UpdateInvoice:
    """
    Use Case: Update an invoice and synchronize its lines

    Business Rules:
    1. Paid and void invoices are locked (Conflict, nothing changes)
    2. Status may only move draft -> sent, draft -> void, sent -> void
    3. A changed invoice number must stay unique
    4. Submitted lines fully replace the existing ones
    5. total_amount = sum of the post-synchronization line totals
    6. Status is never changed implicitly by a new total

    Flow:
    1. Validate header
    2. Get invoice with lock (SELECT FOR UPDATE)
    3. Check version, lock state and status transition
    4. Check invoice number uniqueness
    5. Compute the line synchronization plan
    6. Apply deletes, updates and inserts
    7. Update header and total (version-guarded)
    8. Commit transaction
    9. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        payment_repo: PaymentRepository,
        line_synchronizer: InvoiceLineSynchronizer,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.payment_repo = payment_repo
        self.line_synchronizer = line_synchronizer

    async def execute(
        self, command: UpdateInvoiceCommandDTO, caller: Optional[CallerContext] = None
    ) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice update

        Args:
            command: UpdateInvoiceCommandDTO with header, full line set and optional version
            caller: Identity of the requesting user

        Returns:
            Result[InvoiceResponseDTO]: Updated invoice or error
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

            # Step 3: Version, lock state, transition
            # Errors are built before rollback, which expires the loaded invoice
            if command.version is not None and command.version != invoice.version:
                error = Conflict(
                    code="STALE_INVOICE",
                    message=f"Invoice {command.invoice_id} has changed since it was read",
                    reason=f"expected version {command.version}, found {invoice.version}",
                )
                await self.uow.rollback()
                return Return.err(error)

            current_status = InvoiceStatus(invoice.status)
            if is_locked(current_status):
                error = Conflict(
                    code="INVOICE_LOCKED",
                    message=f"Invoice {command.invoice_id} is {current_status.value} and can no longer be edited",
                )
                await self.uow.rollback()
                return Return.err(error)

            requested_status = InvoiceStatus(command.status)
            if not can_transition(current_status, requested_status):
                await self.uow.rollback()
                return Return.err(
                    ValidationFailure(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot change invoice status from {current_status.value} "
                                f"to {requested_status.value}",
                    )
                )

            # Step 4: Invoice number uniqueness
            if command.invoice_number != invoice.invoice_number:
                if await self.invoice_repo.invoice_number_exists(
                    command.invoice_number, exclude_invoice_id=invoice.id
                ):
                    await self.uow.rollback()
                    return Return.err(
                        Conflict(
                            code="DUPLICATE_INVOICE_NUMBER",
                            message=f"Invoice number {command.invoice_number} is already in use",
                        )
                    )

            # Step 5: Synchronization plan
            existing_lines = await self.invoice_line_repo.get_by_invoice_id(invoice.id)
            plan_result = await self.line_synchronizer.synchronize(
                invoice.id, existing_lines, command.lines
            )
            if plan_result.is_err():
                await self.uow.rollback()
                return Return.err(plan_result.error)
            plan = plan_result.value

            # Step 6: Apply the plan
            for line in plan.to_delete:
                await self.invoice_line_repo.delete(line)
            for line_update in plan.to_update:
                if not line_update.is_noop:
                    await self.invoice_line_repo.update(line_update.apply())
            for line in plan.to_insert:
                await self.invoice_line_repo.create(line)

            # Step 7: Header and total
            invoice.client_id = command.client_id
            invoice.consultation_id = command.consultation_id
            invoice.invoice_number = command.invoice_number
            invoice.issue_date = command.issue_date
            invoice.due_date = command.due_date
            invoice.status = requested_status
            invoice.total_amount = plan.new_total
            updated_invoice = await self.invoice_repo.update(invoice)

            lines = await self.invoice_line_repo.get_by_invoice_id(updated_invoice.id)
            amount_paid = await self.payment_repo.get_total_paid(updated_invoice.id)

            # Step 8: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Invoice {updated_invoice.invoice_number} updated by {caller.caller_id}: "
                f"{len(plan.to_insert)} inserted, {len(plan.to_update)} kept, "
                f"{len(plan.to_delete)} deleted, total {updated_invoice.total_amount}"
            )

            # Step 9: Build response
            return Return.ok(to_invoice_dto(updated_invoice, lines, amount_paid))

        except ConcurrencyConflictError as e:
            await self.uow.rollback()
            logger.warning(f"Invoice update lost a race: {e}")
            return Return.err(
                Conflict(
                    code="INVOICE_MODIFIED_CONCURRENTLY",
                    message=f"Invoice {command.invoice_id} was modified concurrently, retry",
                    reason=str(e),
                )
            )
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
            logger.error(f"Invoice update failed: {e}")
            return Return.err(
                StorageFailure(
                    code="UPDATE_INVOICE_FAILED",
                    message="Failed to update invoice",
                    reason=str(e),
                )
            )
