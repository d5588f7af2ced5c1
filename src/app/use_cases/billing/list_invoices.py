"""
List Invoices Use Case

Retrieves invoice summaries with pagination, newest issue date first.
"""
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import InvoiceStatus
from src.domain.money import ZERO
from .dtos import ListInvoicesResponseDTO
from .mappers import to_invoice_summary_dto


class ListInvoices:
    """
    Use case: View invoices

    Optionally filtered by client and status. Each summary carries the
    amount paid, computed for the whole page in one query.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(
        self,
        client_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[ListInvoicesResponseDTO]:
        """
        List invoices with pagination.

        Args:
            client_id: Restrict to one client
            status: Restrict to one status
            limit: Maximum number of invoices to return (default 20)
            offset: Number of invoices to skip (default 0)

        Returns:
            Result[ListInvoicesResponseDTO]: Paginated invoice list
        """
        invoices = await self.invoice_repo.list(
            client_id=client_id,
            status=status,
            limit=limit,
            offset=offset,
        )
        totals = await self.payment_repo.get_totals_paid([invoice.id for invoice in invoices])

        return Return.ok(
            ListInvoicesResponseDTO(
                invoices=[
                    to_invoice_summary_dto(invoice, totals.get(invoice.id, ZERO))
                    for invoice in invoices
                ],
                limit=limit,
                offset=offset,
            )
        )
