"""
Get Invoice Use Case

Retrieves one invoice with its lines and the amount paid so far.
"""
from libs.result import Result, Return
from src.app.errors import NotFound
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.payment_repository import PaymentRepository
from .dtos import InvoiceResponseDTO
from .mappers import to_invoice_dto


class GetInvoice:
    """Use case: View an invoice"""

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        payment_repo: PaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.payment_repo = payment_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceResponseDTO]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(
                NotFound(
                    code="INVOICE_NOT_FOUND",
                    message=f"Invoice {invoice_id} not found",
                )
            )

        lines = await self.invoice_line_repo.get_by_invoice_id(invoice.id)
        amount_paid = await self.payment_repo.get_total_paid(invoice.id)
        return Return.ok(to_invoice_dto(invoice, lines, amount_paid))
