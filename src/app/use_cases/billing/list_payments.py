"""
List Payments Use Case

Retrieves the payments of an invoice, oldest first.
"""
from libs.result import Result, Return
from src.app.errors import NotFound
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.money import sum_money
from .dtos import ListPaymentsResponseDTO, PaymentResponseDTO
from .mappers import to_payment_dto


class ListPayments:
    """Use case: View the payments of an invoice"""

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(self, invoice_id: int) -> Result[ListPaymentsResponseDTO]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(
                NotFound(
                    code="INVOICE_NOT_FOUND",
                    message=f"Invoice {invoice_id} not found",
                )
            )

        payments = await self.payment_repo.get_by_invoice_id(invoice.id)
        return Return.ok(
            ListPaymentsResponseDTO(
                invoice_id=invoice.id,
                payments=[to_payment_dto(payment) for payment in payments],
                amount_paid=sum_money(payment.amount for payment in payments),
            )
        )


class GetPayment:
    """Use case: View a single payment"""

    def __init__(self, payment_repo: PaymentRepository):
        self.payment_repo = payment_repo

    async def execute(self, payment_id: int) -> Result[PaymentResponseDTO]:
        payment = await self.payment_repo.get_by_id(payment_id)
        if not payment:
            return Return.err(
                NotFound(
                    code="PAYMENT_NOT_FOUND",
                    message=f"Payment {payment_id} not found",
                )
            )
        return Return.ok(to_payment_dto(payment))
